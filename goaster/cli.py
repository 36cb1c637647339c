"""Typer-based CLI for inspecting Go declarations."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .builder import load_module
from .config_manager import load_settings, save_config
from .errors import AsterError
from .kinds import Kind
from .model import Module, Package
from .nodes import FuncNode, Node
from .printer import render_node, store_module

app = typer.Typer(
    help="goaster: reflection over Go type and function declarations.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"goaster v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
):
    """goaster: static reflection over Go source, no compiler required."""
    level = "DEBUG" if verbose else load_settings().log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load(directory: Path, include_tests: Optional[bool] = None) -> Module:
    settings = load_settings()
    if include_tests is None:
        include_tests = settings.include_tests
    try:
        return load_module(directory, include_tests=include_tests, workers=settings.workers)
    except (AsterError, OSError) as exc:
        raise typer.BadParameter(str(exc)) from exc


def _package(module: Module, name: Optional[str]) -> Package:
    if name:
        pkg = module.package(name)
        if pkg is None:
            raise typer.BadParameter(f"No package '{name}' in {module.dir}.")
        return pkg
    if not module.packages:
        raise typer.BadParameter(f"No Go packages in {module.dir}.")
    # Prefer the non-test package when a directory holds both.
    names = sorted(module.packages, key=lambda n: (n.endswith("_test"), n))
    return module.packages[names[0]]


def _describe(node: Node) -> str:
    if isinstance(node, FuncNode):
        params = ", ".join(p.type_name for p in node.params())
        results = ", ".join(r.type_name for r in node.results())
        sig = f"({params})"
        if results:
            sig += f" ({results})" if node.num_result() > 1 else f" {results}"
        if node.recv is not None:
            star = "*" if node.recv.is_pointer else ""
            return f"({star}{node.recv.type_name}) {sig}"
        return sig
    if node.kind is Kind.STRUCT:
        return f"{node.num_field()} fields, {node.num_method()} methods"
    return f"{node.num_method()} methods"


@app.command("inspect")
def inspect(
    directory: Path = typer.Argument(..., exists=True, file_okay=False, help="Directory of Go files."),
    kind: Optional[str] = typer.Option(None, "--kind", "-k", help="Only show this Kind (e.g. Struct)."),
    tests: Optional[bool] = typer.Option(None, "--tests/--no-tests", help="Include _test.go files."),
):
    """List every type and function declaration with its Kind."""
    module = _load(directory, include_tests=tests)
    wanted = None
    if kind:
        try:
            wanted = Kind.from_label(kind)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc

    table = Table(title=f"Declarations in {directory}")
    table.add_column("Package", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Kind", style="magenta")
    table.add_column("File")
    table.add_column("Details", style="dim")

    count = 0
    for node in module.nodes():
        if wanted is not None and node.kind is not wanted:
            continue
        table.add_row(node.pkg_name, node.name, node.kind.label, Path(node.filename).name, _describe(node))
        count += 1
    console.print(table)

    for pkg in module.packages.values():
        for err in pkg.errors:
            console.print(f"[yellow]warning:[/yellow] {err}")
    typer.echo(f"{count} declarations")


@app.command("show")
def show(
    directory: Path = typer.Argument(..., exists=True, file_okay=False, help="Directory of Go files."),
    name: str = typer.Argument(..., help="Declaration name."),
    package: Optional[str] = typer.Option(None, "--package", "-p", help="Package name."),
):
    """Show fields, methods or signature of one declaration."""
    pkg = _package(_load(directory), package)
    node = pkg.scope.get(name)
    if node is None:
        raise typer.BadParameter(f"'{name}' is not declared in package {pkg.name}.")

    console.print(f"[bold]{node.name}[/bold] ({node.kind.label}) in {Path(node.filename).name}")
    if node.doc:
        console.print(node.doc, style="dim")

    if isinstance(node, FuncNode):
        console.print(f"signature: {_describe(node)}")
        if node.is_variadic:
            console.print("variadic")
        return

    if node.is_assign:
        console.print("alias")
    if node.kind is Kind.STRUCT:
        fields = Table(title="Fields")
        fields.add_column("#")
        fields.add_column("Name")
        fields.add_column("Type")
        for i, f in enumerate(node.fields()):
            fields.add_row(str(i), f.name + (" (embedded)" if f.embedded else ""), f.type_name)
        console.print(fields)
    if node.num_method():
        methods = Table(title="Methods")
        methods.add_column("Name")
        methods.add_column("Signature")
        for i in range(node.num_method()):
            fn = node.method(i)
            methods.add_row(fn.name, _describe(fn))
        console.print(methods)
    if node.unresolved_embeds:
        console.print(f"unresolved embeds: {', '.join(node.unresolved_embeds)}")


@app.command("implements")
def implements(
    directory: Path = typer.Argument(..., exists=True, file_okay=False, help="Directory of Go files."),
    type_name: str = typer.Argument(..., help="Candidate type."),
    iface: str = typer.Argument(..., help="Interface type."),
    pointer: bool = typer.Option(False, "--pointer", help="Check *T instead of T."),
    package: Optional[str] = typer.Option(None, "--package", "-p", help="Package name."),
):
    """Check whether TYPE satisfies interface IFACE (exit code 1 if not)."""
    pkg = _package(_load(directory), package)
    t = pkg.type_node(type_name)
    u = pkg.type_node(iface)
    if t is None:
        raise typer.BadParameter(f"'{type_name}' is not a type in package {pkg.name}.")
    if u is None:
        raise typer.BadParameter(f"'{iface}' is not a type in package {pkg.name}.")
    try:
        ok = t.implements(u, pointer=pointer)
    except AsterError as exc:
        raise typer.BadParameter(str(exc)) from exc

    subject = f"*{type_name}" if pointer else type_name
    if ok:
        typer.echo(f"{subject} implements {iface}")
        return
    typer.echo(f"{subject} does not implement {iface}")
    raise typer.Exit(code=1)


@app.command("render")
def render(
    directory: Path = typer.Argument(..., exists=True, file_okay=False, help="Directory of Go files."),
    name: str = typer.Argument(..., help="Declaration name."),
    package: Optional[str] = typer.Option(None, "--package", "-p", help="Package name."),
):
    """Print the source of one declaration with its doc comment."""
    pkg = _package(_load(directory), package)
    node = pkg.scope.get(name)
    if node is None:
        raise typer.BadParameter(f"'{name}' is not declared in package {pkg.name}.")
    typer.echo(render_node(node))


@app.command("format")
def format_cmd(
    directory: Path = typer.Argument(..., exists=True, file_okay=False, help="Directory of Go files."),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write into this directory instead."),
):
    """Render every file of the module and write it back."""
    settings = load_settings()
    module = _load(directory)
    try:
        written = store_module(module, out_dir=out, gofmt=settings.gofmt)
    except (AsterError, OSError) as exc:
        typer.echo(f"Format failed: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Wrote {len(written)} files.")


@app.command("config")
def config_cmd(
    include_tests: Optional[bool] = typer.Option(None, "--tests/--no-tests", help="Load _test.go files."),
    workers: Optional[int] = typer.Option(None, "--workers", min=1, help="Packages built in parallel."),
    gofmt: Optional[bool] = typer.Option(None, "--gofmt/--no-gofmt", help="Run gofmt when formatting."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Default log level."),
):
    """Show or update ~/.goaster/config.toml."""
    values = {
        "include_tests": include_tests,
        "workers": workers,
        "gofmt": gofmt,
        "log_level": log_level.upper() if log_level else None,
    }
    values = {k: v for k, v in values.items() if v is not None}
    if values and not save_config("loader", values):
        typer.echo("Could not write configuration.", err=True)
        raise typer.Exit(code=1)

    settings = load_settings()
    typer.echo(f"include_tests = {settings.include_tests}")
    typer.echo(f"workers = {settings.workers}")
    typer.echo(f"gofmt = {settings.gofmt}")
    typer.echo(f"log_level = {settings.log_level}")
