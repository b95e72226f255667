"""armforge CLI entrypoint."""
import typer
from pathlib import Path
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from armforge.template import writer
from armforge.template.generator import TEMPLATE_FILE_NAME, TemplateGenerator

app = typer.Typer(help="armforge - compile infrastructure manifests into ARM templates")
console = Console()


@app.command("generate")
def generate(
    config: str = typer.Option("infra.yaml", "--config", "-c", help="Path to the infrastructure YAML file"),
    output_dir: str = typer.Option(None, "--output-dir", "-o", help="Directory for the generated ARM template"),
    debug: bool = typer.Option(False, "--debug", help="Print verbose debug information including the generated template"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing template")
):
    """Generate an ARM template from a YAML manifest."""
    console.print("[bold blue]Generating ARM template...[/]")

    output_path = Path(output_dir) if output_dir else Path(config).parent
    template_path = output_path / TEMPLATE_FILE_NAME
    if template_path.exists() and not force:
        console.print(f"[bold yellow]WARNING: Template already exists: {template_path}[/]")
        console.print("[yellow]Use --force to overwrite the existing file.[/]")
        raise typer.Exit(code=1)

    try:
        generator = TemplateGenerator(config, output_dir, debug=debug, console=console)
        if not generator.manifest.region:
            console.print("[bold yellow]WARNING: No region specified in manifest; every service must set its own.[/]")
        generated = generator.generate()
    except Exception as e:
        console.print(f"[bold red]Error: {escape(str(e))}[/]")
        raise typer.Exit(code=1)

    console.print(f"[green]ARM template generated at {generated}[/]")

    # In debug mode, display the generated template
    if debug:
        console.print("\n[bold blue]Generated ARM Template:[/]")
        console.print_json(Path(generated).read_text())


@app.command("validate")
def validate(
    config: str = typer.Option("infra.yaml", "--config", "-c", help="Path to the infrastructure YAML file"),
    debug: bool = typer.Option(False, "--debug", help="Print verbose debug information")
):
    """Build and link the manifest without writing anything."""
    try:
        generator = TemplateGenerator(config, debug=debug, console=console)
        template = generator.build_template()
    except Exception as e:
        console.print(f"[bold red]Error: {escape(str(e))}[/]")
        raise typer.Exit(code=1)

    table = Table(title="Resources")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Depends on")
    for linked in template.resources:
        resource_id = linked.resource.resource_id
        table.add_row(escape(resource_id.name), resource_id.resource_type.type, escape("\n".join(linked.depends_on)))
    console.print(table)

    if template.parameters:
        console.print("[yellow]Parameters to supply at deployment:[/]")
        for parameter in template.parameters:
            console.print(f"  {parameter.name} ({parameter.type})")

    if debug:
        console.print_json(writer.to_json(template))

    console.print("[green]Manifest is valid.[/]")


if __name__ == "__main__":
    app()
