"""Full-text search across the memory documents."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class SearchResult:
    file: str
    line_number: int
    line: str
    score: float


def search_files(root: Path, query: str, file_pattern: str = "*.md") -> list[SearchResult]:
    """Case-insensitive term search over markdown files. Returns ranked results."""
    results: list[SearchResult] = []
    query_lower = query.lower()
    terms = query_lower.split()
    if not terms:
        return results

    for path in sorted(root.glob(file_pattern)):
        rel = str(path.relative_to(root))
        for i, line in enumerate(path.read_text().split("\n"), 1):
            line_lower = line.lower()
            matched_terms = sum(1 for t in terms if t in line_lower)
            if matched_terms == 0:
                continue

            # Headers and exact phrase matches rank higher
            score = matched_terms / len(terms)
            if line.strip().startswith("#"):
                score *= 1.5
            if query_lower in line_lower:
                score *= 2.0

            results.append(SearchResult(file=rel, line_number=i, line=line.strip(), score=score))

    results.sort(key=lambda r: r.score, reverse=True)
    return results
