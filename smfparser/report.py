"""Human-readable report of a parsed material."""

import typer

from smfparser.parser.models import MaterialFile, MaterialProxy

_BANNER = (
    "===============================\n"
    "INFORMATION ABOUT THE MATERIAL\n"
    "==============================="
)


def _bold(text: str, color: bool) -> str:
    return typer.style(text, bold=True) if color else text


def _italic(text: str, color: bool) -> str:
    return typer.style(text, italic=True) if color else text


def _format_proxies(
    title: str, proxies: tuple[MaterialProxy, ...], color: bool
) -> list[str]:
    lines = [_bold(title, color)]
    for proxy in proxies:
        lines.append(f"\t{_italic(proxy.name, color)}")
        for name, reference in proxy.parameters.items():
            lines.append(f"\t\t{name} = {reference}")
    return lines


def format_material(material: MaterialFile, color: bool = True) -> str:
    """Format a material as a multi-line report.

    Args:
        material: Parsed material
        color: Whether to add terminal styling

    Returns:
        The report text
    """
    lines = [
        _bold(_BANNER, color),
        f"{_bold('SHADER:', color)} {material.shader}",
        _bold("VARIABLES:", color),
    ]
    for name, value in material.variables.items():
        lines.append(f"\t{_italic(name, color)}: {value!r}")

    lines.extend(_format_proxies("SETUP PROXIES:", material.setup_proxies, color))
    lines.extend(_format_proxies("RENDER PROXIES:", material.render_proxies, color))
    return "\n".join(lines)


def print_material(material: MaterialFile, color: bool = True) -> None:
    """Print the material report to stdout."""
    typer.echo(format_material(material, color=color))
