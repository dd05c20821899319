"""
norskbot/translation/graph.py

Translation graph: every registered Translator contributes one directed edge
per (source, target) pair it supports. A request is served by the shortest
chain of edges (fewest provider calls) from source to target.

Conflicts: translators are registered in priority order. When two translators
declare the same edge, the first one keeps it.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from functools import partial
from typing import Awaitable, Callable, Iterable, List, Optional

from .errors import TranslationGraphConflictError
from .languages import Language


@dataclass(frozen=True)
class TranslationOutput:
    text: str
    detected_language: Optional[Language] = None


TranslateFunction = Callable[[str], Awaitable[TranslationOutput]]
ProviderTranslate = Callable[[Language, Language, str], Awaitable[TranslationOutput]]


@dataclass(frozen=True)
class Translator:
    name: str
    sources: tuple[Language, ...]  # ordered: edge insertion order breaks BFS ties
    targets: tuple[Language, ...]
    translate: ProviderTranslate
    expensive: bool  # metered/paid API, rate-limited harder


@dataclass(frozen=True)
class TranslationEdge:
    source: Language
    target: Language
    invoke: TranslateFunction
    expensive: bool
    translator: str


TranslationGraph = dict[Language, dict[Language, TranslationEdge]]


def build_graph(translators: Iterable[Translator], strict: bool = False) -> TranslationGraph:
    """
    Build the translation graph from translators given in priority order.

    With `strict`, two translators declaring the same edge raise
    TranslationGraphConflictError instead of the first one winning.
    """
    graph: TranslationGraph = {}
    for translator in translators:
        for source in translator.sources:
            for target in translator.targets:
                if source == target or target == Language.AUTO:
                    continue
                edges = graph.setdefault(source, {})
                if target in edges:
                    existing = edges[target].translator
                    if strict:
                        raise TranslationGraphConflictError(
                            f"{source.value}->{target.value} declared by both "
                            f"'{existing}' and '{translator.name}'"
                        )
                    logging.debug(
                        "Edge %s->%s already served by '%s', ignoring '%s'",
                        source.value, target.value, existing, translator.name,
                    )
                    continue
                edges[target] = TranslationEdge(
                    source=source,
                    target=target,
                    invoke=partial(translator.translate, source, target),
                    expensive=translator.expensive,
                    translator=translator.name,
                )
    return graph


def find_path(graph: TranslationGraph, source: Language, target: Language) -> List[Language]:
    """
    Breadth-first search for the shortest chain of languages from source to
    target. Returns an empty list when no chain exists.
    """
    queue: deque[List[Language]] = deque([[source]])
    visited = {source}

    while queue:
        path = queue.popleft()
        last = path[-1]
        if last == target:
            return path
        for neighbor in graph.get(last, {}):
            if neighbor not in visited:
                visited.add(neighbor)
                queue.append([*path, neighbor])

    return []


@dataclass
class TranslationPipeline:
    steps: List[TranslationEdge] = field(default_factory=list)

    @property
    def expensive(self) -> bool:
        return any(step.expensive for step in self.steps)

    @property
    def path(self) -> List[Language]:
        if not self.steps:
            return []
        return [self.steps[0].source] + [step.target for step in self.steps]

    def __bool__(self) -> bool:
        return bool(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    async def run(self, text: str) -> TranslationOutput:
        """
        Run every hop in order, feeding each hop's output to the next.
        Only the first hop may report a detected source language.
        Provider errors propagate unchanged.
        """
        detected: Optional[Language] = None
        for idx, step in enumerate(self.steps):
            output = await step.invoke(text)
            text = output.text
            if idx == 0:
                detected = output.detected_language
            logging.debug(
                "Translated from %s to %s via %s: %s",
                step.source.value, step.target.value, step.translator, text,
            )
        return TranslationOutput(text=text, detected_language=detected)


def resolve_pipeline(graph: TranslationGraph, source: Language, target: Language) -> TranslationPipeline:
    path = find_path(graph, source, target)
    return TranslationPipeline(
        steps=[graph[a][b] for a, b in zip(path, path[1:])]
    )
