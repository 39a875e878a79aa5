"""Click option helpers for edge-retry property overrides."""
import click


def parse_properties(ctx: click.Context, param: click.Parameter, values: tuple[str, ...]) -> dict[str, str]:
    """Turn repeated -D NAME=VALUE options into a property mapping.

    Args:
        ctx: Click context (unused).
        param: The option being parsed.
        values: Raw NAME=VALUE strings in command-line order.

    Returns:
        Mapping of property name to value; later duplicates win.

    Raises:
        click.BadParameter: If a value has no '=' or an empty name.
    """
    properties: dict[str, str] = {}
    for item in values:
        name, sep, value = item.partition("=")
        name = name.strip()
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=VALUE, got {item!r}", param=param)
        properties[name] = value.strip()
    return properties
