"""
Consolidation Advisor - Ways to fold a cluster of lines into fewer lines.

Suggestions are ordered from most to least specific:
- targeter-branch: the lines differ only in who they target
- variable: the lines differ in one attribute value
- parameterized-metaskill: one or two values vary
- metaskill: always applicable
"""

from __future__ import annotations
from dataclasses import dataclass

from .clusters import DuplicateCluster, SimilarityCluster


@dataclass(frozen=True)
class ConsolidationSuggestion:
    method: str
    description: str
    example: str
    benefit: str


def suggest(cluster: DuplicateCluster | SimilarityCluster) -> list[ConsolidationSuggestion]:
    """
    Consolidation suggestions for a cluster, most specific first.

    Raises TypeError for anything that is not a cluster.
    """
    if isinstance(cluster, DuplicateCluster):
        return _suggest_for_duplicates(cluster)
    if isinstance(cluster, SimilarityCluster):
        return _suggest_for_similar(cluster)
    raise TypeError(f"Cannot suggest consolidation for {type(cluster).__name__}")


def _suggest_for_duplicates(cluster: DuplicateCluster) -> list[ConsolidationSuggestion]:
    line = _as_item(cluster.source_line)
    return [ConsolidationSuggestion(
        method="metaskill",
        description="Move the repeated line into a metaskill and call it",
        example=(
            "SharedSkill:\n"
            "  Skills:\n"
            f"  {line}\n"
            "\n"
            "Then use: - skill{s=SharedSkill}"
        ),
        benefit=f"Replaces {cluster.count} copies with one definition",
    )]


def _suggest_for_similar(cluster: SimilarityCluster) -> list[ConsolidationSuggestion]:
    varying = cluster.varying_values()
    size = len(cluster.members) + 1
    first = cluster.members[0].differences if cluster.members else []
    suggestions = []

    if varying == [("targeter", None)]:
        targeters = _values_for(cluster, "targeter", None)
        suggestions.append(ConsolidationSuggestion(
            method="targeter-branch",
            description="Keep one line and branch on the target instead of repeating it",
            example=(
                f"Targets used: {', '.join(targeters)}\n"
                f"- skill{{s=SharedSkill}} {targeters[0]}"
            ),
            benefit=f"Collapses {size} lines that differ only in their targeter",
        ))

    if len(varying) == 1 and varying[0][0] == "attribute":
        key = varying[0][1]
        values = _values_for(cluster, "attribute", key)
        suggestions.append(ConsolidationSuggestion(
            method="variable",
            description=f"Store '{key}' in a variable and reference it with a placeholder",
            example=(
                f"- setvariable{{var=caster.{key};value={values[0]}}} @self\n"
                f"- {_with_placeholder(cluster.base_line, key)}"
            ),
            benefit=f"One line covers the values {', '.join(values)}",
        ))

    if 1 <= len(varying) <= 2:
        params = [key or dimension for dimension, key in varying]
        suggestions.append(ConsolidationSuggestion(
            method="parameterized-metaskill",
            description="Create a metaskill with placeholders for the varying values",
            example=(
                "SharedSkill:\n"
                "  Skills:\n"
                f"  {_as_item(cluster.base_line)}\n"
                "\n"
                "Then use: - skill{s=SharedSkill} with "
                + ", ".join(f"{p}=<skill.var.{p}>" for p in params)
            ),
            benefit=f"Consolidates {size} similar lines, varying {', '.join(params)}",
        ))

    changed = ", ".join(
        d.attribute_key or d.dimension for d in first
    ) or "nothing"
    suggestions.append(ConsolidationSuggestion(
        method="metaskill",
        description="Move the shared behavior into a metaskill and call it",
        example=(
            "SharedSkill:\n"
            "  Skills:\n"
            f"  {_as_item(cluster.base_line)}\n"
            "\n"
            f"Then use: - skill{{s=SharedSkill}} (first variant changes {changed})"
        ),
        benefit=f"Reduces {size} lines to one definition plus calls",
    ))
    return suggestions


def _values_for(cluster: SimilarityCluster, dimension: str, key: str | None) -> list[str]:
    """Distinct values of one dimension, base value first."""
    values: dict[str, None] = {}
    for member in cluster.members:
        for difference in member.differences:
            if difference.key == (dimension, key):
                values.setdefault(difference.value_in_base, None)
                values.setdefault(difference.value_in_member, None)
    return list(values)


def _as_item(line: str) -> str:
    line = line.strip()
    return line if line.startswith("-") else f"- {line}"


def _with_placeholder(line: str, key: str) -> str:
    """Rewrite 'key=value' in a line's text as 'key=<caster.var.key>'."""
    line = _as_item(line)[2:]
    marker = f"{key}="
    for opener in "{;":
        start = line.find(opener + marker)
        if start != -1:
            start += 1
            break
    else:
        return line
    end = start + len(marker)
    while end < len(line) and line[end] not in ";}":
        end += 1
    return f"{line[:start]}{marker}<caster.var.{key}>{line[end:]}"
