"""Top-level construction of a material from its parse tree."""

from loguru import logger

from smfparser.parser.collector import (
    ProxyGroup,
    check_shader,
    collect_proxy_block,
    collect_shader,
    collect_variable,
)
from smfparser.parser.models import CollectedMaterial, MaterialFile
from smfparser.parser.syntax import NodeKind, SyntaxNode


def assemble_material(root: SyntaxNode) -> MaterialFile:
    """Build a material from the root node of a parse tree.

    The root's children are visited once, in order. Unknown top-level
    constructs are skipped with a warning; any other error aborts the build.

    Args:
        root: MATERIAL node returned by the grammar

    Returns:
        The immutable material

    Raises:
        MaterialError: If any declaration is malformed or no shader is named
    """
    collected = CollectedMaterial()

    for child in root.children:
        match child.kind:
            case NodeKind.SHADER_BLOCK:
                collect_shader(child, collected)
            case NodeKind.VARIABLE_DECLARATION:
                collect_variable(child, collected)
            case NodeKind.SETUP_PROXIES:
                collected.setup_proxies.extend(
                    collect_proxy_block(child, ProxyGroup.SETUP)
                )
            case NodeKind.RENDER_PROXIES:
                collected.render_proxies.extend(
                    collect_proxy_block(child, ProxyGroup.RENDER)
                )
            case _:
                logger.warning(f"Unsupported rule: {child.rule or child.kind.name}")

    check_shader(collected)

    material = collected.freeze()
    logger.debug(
        f"Assembled material for shader {material.shader}: "
        f"{len(material.variables)} variables, "
        f"{len(material.setup_proxies)} setup proxies, "
        f"{len(material.render_proxies)} render proxies"
    )
    return material
