"""Fallback text for arguments a template never read.

No argument is silently dropped: after rendering, every unconsumed argument is
appended to the output as a space followed by ``str(argument)``.
"""

from argformat.core.arguments import ResolutionContext


def fallback_text(ctx: ResolutionContext) -> str:
    """Build the suffix for unconsumed arguments.

    Args:
        ctx: Resolution context after rendering

    Returns:
        Space-prefixed text of each unconsumed argument in call order,
        or an empty string when every argument was consumed
    """
    if len(ctx.consumed) >= len(ctx.arguments):
        return ""

    return "".join(
        f" {argument}"
        for position, argument in enumerate(ctx.arguments)
        if not ctx.is_consumed(position)
    )
