"""
Declaration collector for material descriptions.

This module turns shader blocks, variable declarations and proxy blocks of the
parse tree into entries of a :class:`CollectedMaterial`.
"""

from enum import Enum
from types import MappingProxyType

from loguru import logger

from smfparser.parser.errors import (
    ExpectedIdentifier,
    InvalidReferenceShape,
    MissingShaderIdentifier,
    NoShaderSpecified,
    UnsupportedValueKind,
)
from smfparser.parser.models import (
    CollectedMaterial,
    MaterialProxy,
    ParameterReference,
)
from smfparser.parser.references import identifier_text, resolve_reference
from smfparser.parser.syntax import NodeKind, SyntaxNode
from smfparser.parser.values import interpret_literal


class ProxyGroup(Enum):
    """When a block of proxies runs."""

    SETUP = "setup"
    RENDER = "render"


def collect_shader(node: SyntaxNode, collected: CollectedMaterial) -> None:
    """Record the shader name from the shader block.

    Raises:
        MissingShaderIdentifier: If the block is empty
        ExpectedIdentifier: If the block does not hold an identifier
    """
    if node.is_leaf:
        raise MissingShaderIdentifier("Empty shader block", node)
    collected.shader = identifier_text(node.children[0], "shader block")
    logger.debug(f"Collected shader: {collected.shader}")


def collect_variable(node: SyntaxNode, collected: CollectedMaterial) -> None:
    """Record a variable declaration, replacing any earlier one of the same name."""
    name = identifier_text(
        node.children[0] if node.children else None, "variable declaration"
    )
    if len(node.children) < 2:
        raise UnsupportedValueKind(f"Variable '{name}' has no value", node)

    value = interpret_literal(node.children[1])
    if name in collected.variables:
        logger.debug(f"Variable {name} redeclared, keeping the last value")
    collected.variables[name] = value
    logger.debug(f"Collected variable: {name} = {value!r}")


def check_shader(collected: CollectedMaterial) -> None:
    """Fail if no shader name was collected."""
    if not collected.shader:
        raise NoShaderSpecified("No shader specified")


def collect_proxy(node: SyntaxNode) -> MaterialProxy:
    """Build one proxy invocation from its name and parameter declarations."""
    children = list(node.children)
    name = identifier_text(children[0] if children else None, "proxy")

    parameters: dict[str, ParameterReference] = {}
    for param in children[1:]:
        if param.kind != NodeKind.PROXY_PARAMETER:
            raise InvalidReferenceShape(
                f"Expected a parameter declaration in proxy '{name}', "
                f"got {param.kind.name}",
                param,
            )
        param_name = identifier_text(
            param.children[0] if param.children else None, f"proxy '{name}'"
        )
        if len(param.children) < 2:
            raise InvalidReferenceShape(
                f"Parameter '{param_name}' of proxy '{name}' has no value", param
            )
        parameters[param_name] = resolve_reference(param.children[1])

    return MaterialProxy(name=name, parameters=MappingProxyType(parameters))


def collect_proxy_block(node: SyntaxNode, group: ProxyGroup) -> list[MaterialProxy]:
    """Build the proxy invocations of a setup or render block in source order."""
    proxies = []
    for child in node.children:
        if child.kind != NodeKind.PROXY:
            raise ExpectedIdentifier(
                f"Expected a proxy in {group.value} block, got {child.kind.name}",
                child,
            )
        proxy = collect_proxy(child)
        proxies.append(proxy)
        logger.debug(
            f"Collected {group.value} proxy: {proxy.name}, "
            f"params: {list(proxy.parameters)}"
        )
    return proxies
