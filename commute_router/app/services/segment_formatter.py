from __future__ import annotations

import html
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import Iterable, Literal

from commute_router.domain.models import (
    DirectionLeg,
    ProviderStep,
    StationRecord,
    TransitDetail,
)

StationPurpose = Literal["pickup", "dropoff"]

# Inline formatting the provider uses in instructions ("Turn <b>left</b>").
SAFE_INLINE_TAGS = frozenset(
    {"b", "strong", "i", "em", "u", "br", "span", "sub", "sup", "wbr"}
)
VOID_TAGS = frozenset({"br", "wbr"})
# Dropped together with everything inside them.
DROP_CONTENT_TAGS = frozenset(
    {"script", "style", "iframe", "object", "embed", "noscript", "template"}
)
# Block tags become a single space so words do not run together.
BLOCK_TAGS = frozenset({"div", "p", "li", "ul", "ol", "tr", "td", "table"})


class _InstructionSanitizer(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._out: list[str] = []
        self._drop_depth = 0
        self._open: list[str] = []

    def handle_starttag(self, tag: str, attrs) -> None:
        if tag in DROP_CONTENT_TAGS:
            self._drop_depth += 1
            return
        if self._drop_depth:
            return
        if tag in SAFE_INLINE_TAGS:
            # Attributes are never kept (on*, style, href=javascript: ...).
            self._out.append(f"<{tag}>")
            if tag not in VOID_TAGS:
                self._open.append(tag)
        elif tag in BLOCK_TAGS:
            self._out.append(" ")

    def handle_startendtag(self, tag: str, attrs) -> None:
        if self._drop_depth:
            return
        if tag in VOID_TAGS:
            self._out.append(f"<{tag}>")
        elif tag in BLOCK_TAGS:
            self._out.append(" ")

    def handle_endtag(self, tag: str) -> None:
        if tag in DROP_CONTENT_TAGS:
            self._drop_depth = max(0, self._drop_depth - 1)
            return
        if self._drop_depth:
            return
        if tag in SAFE_INLINE_TAGS and tag in self._open:
            # Close anything left open inside it first.
            while self._open:
                open_tag = self._open.pop()
                self._out.append(f"</{open_tag}>")
                if open_tag == tag:
                    break
        elif tag in BLOCK_TAGS:
            self._out.append(" ")

    def handle_data(self, data: str) -> None:
        if self._drop_depth:
            return
        self._out.append(html.escape(data, quote=False))

    def result(self) -> str:
        self.close()
        while self._open:
            self._out.append(f"</{self._open.pop()}>")
        return " ".join("".join(self._out).split())


def sanitize_instructions(raw: str | None) -> str:
    """Strip executable markup from provider instructions.

    Keeps plain text and a small set of attribute-free inline tags.
    """

    if not raw:
        return ""
    parser = _InstructionSanitizer()
    parser.feed(raw)
    return parser.result()


@dataclass(frozen=True, slots=True)
class StationContext:
    station: StationRecord
    purpose: StationPurpose


def availability_note(context: StationContext) -> str:
    st = context.station
    if context.purpose == "pickup":
        count, noun, verb = st.bikes_available, "bike", "Pick up at"
    else:
        count, noun, verb = st.docks_available, "dock", "Drop off at"
    plural = "" if count == 1 else "s"
    return f"({verb} {html.escape(st.name, quote=False)}: {count} {noun}{plural} available)"


def format_leg(
    step: ProviderStep, station_context: StationContext | None = None
) -> DirectionLeg:
    text = sanitize_instructions(step.instructions_html)
    if station_context is not None:
        note = availability_note(station_context)
        text = f"{text} {note}" if text else note

    transit = None
    if step.is_transit:
        transit = TransitDetail(
            line_name=step.line_name or "",
            line_short_name=step.line_short_name or "",
            vehicle_type=step.vehicle_type,
            departure_stop_name=step.departure_stop_name or "",
            arrival_stop_name=step.arrival_stop_name or "",
        )

    return DirectionLeg(
        mode=step.mode,
        instruction_text=text,
        distance_text=step.distance_text,
        duration_text=step.duration_text,
        duration_s=float(step.duration_s),
        start_location=step.start_location,
        end_location=step.end_location,
        transit=transit,
    )


def format_legs(
    steps: Iterable[ProviderStep], *, last_step_context: StationContext | None = None
) -> tuple[DirectionLeg, ...]:
    """Format a run of steps, annotating only the final one with a station."""

    items = list(steps)
    out: list[DirectionLeg] = []
    for i, step in enumerate(items):
        ctx = last_step_context if i == len(items) - 1 else None
        out.append(format_leg(step, ctx))
    return tuple(out)
