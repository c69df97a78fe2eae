"""Rendering of a resolved install order."""

from .models import ResolutionPlan


def render_plan(plan: ResolutionPlan) -> str:
    lines = [f"Installation Plan: {plan.root}", ""]

    if plan.is_empty():
        lines.append("Nothing to install.")
        return "\n".join(lines)

    if plan.diagnostics:
        lines.append("⚠️  Warnings:")
        for message in plan.diagnostics:
            lines.append(f"   • {message}")
        lines.append("")

    lines.append("Steps:")
    for i, handle in enumerate(reversed(plan.artifacts), 1):
        marker = "📦" if handle.identifier.lower() == plan.root.lower() else "🔗"
        lines.append(f"  {i}. {marker} {handle.identifier}@{handle.version}")
        if handle.dependencies:
            lines.append(f"     requires: {', '.join(handle.dependencies)}")

    return "\n".join(lines)


__all__ = ["render_plan"]
