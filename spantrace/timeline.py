"""The ordered sequence of elementary spans that makes up one span's timeline."""

from __future__ import annotations

import enum
from bisect import bisect_left
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

from spantrace.elements import ElementarySpan, Mark
from spantrace.options import (
    DEFAULT_MARK_OPTIONS,
    DEFAULT_SUSPEND_OPTIONS,
    Comparator,
    MarkOption,
    SuspendOption,
    TraceError,
    assemble_options,
)

__all__ = ["FissionPolicy", "Timeline"]


class FissionPolicy(enum.Enum):
    """Which of several elementary spans containing a point gets fissioned."""

    EARLIEST = "earliest"
    LATEST = "latest"


def _first_index(items: Sequence[Any], predicate: Callable[[Any], bool]) -> int:
    """Return the first index at which `predicate` holds, or len(items).

    The predicate must be false for a prefix of `items` and true thereafter.
    """
    return bisect_left(items, True, key=predicate)


class Timeline:
    """A span's elementary spans, in increasing temporal order.

    Invariants kept on the sequence:
      * elementary spans never overlap; each begins at or after the end of its
        predecessor, and gaps between them are suspended intervals;
      * the start of the first and the end of the last are never moved;
      * each elementary span has at most one incoming dependency, at its
        start, and at most one outgoing dependency, at its end;
      * zero-duration elementary spans are permitted.
    """

    def __init__(
        self,
        start: Any = None,
        end: Any = None,
        elementary_spans: Optional[Iterable[ElementarySpan]] = None,
    ) -> None:
        if elementary_spans is None:
            self.start = start
            self.end = end
            self.elementary_spans: List[ElementarySpan] = [
                ElementarySpan(span=self, start=start, end=end)
            ]
            return
        ess = list(elementary_spans)
        if not ess:
            raise TraceError("at least one elementary span must be provided")
        for prev, nxt in zip(ess, ess[1:]):
            prev.successor, nxt.predecessor = nxt, prev
        self.elementary_spans = ess
        self.start = ess[0].start if start is None else start
        self.end = ess[-1].end if end is None else end

    def find_first_ending_at_or_after(
        self, comparator: Comparator, at: Any
    ) -> Tuple[int, bool]:
        """Return the index of the first elementary span ending at or after `at`.

        The boolean tells whether that elementary span contains `at`
        (inclusively).  Returns (0, False) if `at` precedes every elementary
        span and (n, False) if it follows them all.
        """
        ess = self.elementary_spans
        if not ess or comparator.less(at, ess[0].start):
            return 0, False
        idx = _first_index(ess, lambda es: comparator.less_or_equal(at, es.end))
        if idx == len(ess):
            return idx, False
        if comparator.greater(ess[idx].start, at):
            return idx, False
        return idx, True

    def find_last_ending_at_or_after(
        self, comparator: Comparator, at: Any
    ) -> Tuple[int, bool]:
        """Return the index of the last elementary span ending at or after `at`.

        The boolean tells whether that elementary span contains `at`
        (inclusively).  Returns (0, False) if `at` precedes every elementary
        span and (n, False) if it follows them all.
        """
        ess = self.elementary_spans
        idx = _first_index(ess, lambda es: comparator.less(at, es.end))
        if idx < len(ess) and comparator.greater_or_equal(at, ess[idx].start):
            return idx, True
        if idx == 0:
            return idx, False
        prev = idx - 1
        if comparator.greater(at, ess[prev].end):
            return idx, False
        return prev, True

    def fission_at(
        self, comparator: Comparator, at: Any, policy: FissionPolicy
    ) -> Optional[Tuple[int, int]]:
        """Split the elementary span containing `at` into two at that point.

        Returns the indexes of the halves before and after `at`, or None if no
        elementary span contains `at`.  Any incoming dependency stays with the
        earlier half and any outgoing dependency moves to the later half.
        """
        if policy is FissionPolicy.EARLIEST:
            idx, contains = self.find_first_ending_at_or_after(comparator, at)
        elif policy is FissionPolicy.LATEST:
            idx, contains = self.find_last_ending_at_or_after(comparator, at)
        else:
            raise TraceError(f"unknown fission policy {policy!r}")
        if not contains:
            return None
        original = self.elementary_spans[idx]
        split = _first_index(
            original.marks, lambda m: comparator.greater_or_equal(m.moment, at)
        )
        new = ElementarySpan(
            span=original.span,
            start=at,
            end=original.end,
            marks=original.marks[split:],
            predecessor=original,
            successor=original.successor,
        )
        original.marks = original.marks[:split]
        original.successor = new
        if new.successor is not None:
            new.successor.predecessor = new
        original.end = at
        if original.outgoing is not None:
            original.outgoing.replace_origin_elementary_span(original, new)
        self.elementary_spans.insert(idx + 1, new)
        return idx, idx + 1

    def create_instantaneous_within_suspend_at(
        self, comparator: Comparator, at: Any
    ) -> int:
        """Insert a zero-width elementary span at `at`, inside a suspended gap.

        Returns the index of the new elementary span.
        """
        idx, contains = self.find_first_ending_at_or_after(comparator, at)
        if contains:
            raise TraceError(
                "can't create instantaneous elementary span: "
                "another elementary span would overlap it"
            )
        ess = self.elementary_spans
        if idx == 0 or idx == len(ess):
            raise TraceError(
                f"can't create instantaneous elementary span at {at}: "
                f"it would lie outside its span ({self.start}-{self.end})"
            )
        nxt = ess[idx]
        if comparator.less(nxt.start, at):
            raise TraceError(
                f"can't create instantaneous elementary span at {at}: "
                "span is not suspended then"
            )
        prev = ess[idx - 1]
        new = ElementarySpan(
            span=nxt.span, start=at, end=at, predecessor=prev, successor=nxt
        )
        nxt.predecessor = new
        prev.successor = new
        ess.insert(idx, new)
        return idx

    def _rehome_orphaned_marks(
        self, comparator: Comparator, orphans: List[Mark], opts: SuspendOption
    ) -> None:
        if not orphans:
            return
        if not opts & SuspendOption.FISSIONS_AROUND_MARKS:
            raise TraceError(
                "failed to suspend: at least one mark lies within suspend interval"
            )
        for orphan in orphans:
            idx = self.create_instantaneous_within_suspend_at(comparator, orphan.moment)
            self.elementary_spans[idx].marks = [orphan]

    def _suspend_within_one(
        self, comparator: Comparator, start: Any, end: Any, opts: SuspendOption
    ) -> None:
        if comparator.equal(start, end):
            return
        idx, contains = self.find_first_ending_at_or_after(comparator, end)
        if not contains:
            raise TraceError(f"no elementary span at {end}")
        if not self.elementary_spans[idx].contains(comparator, start):
            raise TraceError("requested suspend crosses elementary span boundaries")
        fissioned = self.fission_at(comparator, end, FissionPolicy.EARLIEST)
        if fissioned is None:
            raise TraceError("failed to fission an elementary span that should have existed")
        pre = self.elementary_spans[fissioned[0]]
        post = self.elementary_spans[fissioned[1]]
        pre.end = start
        orphan_start = _first_index(
            pre.marks, lambda m: comparator.greater(m.moment, start)
        )
        orphans = pre.marks[orphan_start:]
        self._rehome_orphaned_marks(comparator, orphans, opts)
        pre.marks = pre.marks[:orphan_start]
        post.start = end
        orphan_end = _first_index(
            post.marks, lambda m: comparator.greater_or_equal(m.moment, end)
        )
        orphans = post.marks[:orphan_end]
        self._rehome_orphaned_marks(comparator, orphans, opts)
        post.marks = post.marks[orphan_end:]

    def suspend(
        self, comparator: Comparator, start: Any, end: Any, *args: SuspendOption
    ) -> None:
        """Suspend execution between `start` and `end`.

        By default the interval must lie within one elementary span.  With
        FISSIONS_AROUND_ELEMENTARY_SPAN_ENDPOINTS it may cross several, each
        of which is suspended in turn, working back from `end`.
        """
        opts = assemble_options(DEFAULT_SUSPEND_OPTIONS, *args)
        if not opts & SuspendOption.FISSIONS_AROUND_ELEMENTARY_SPAN_ENDPOINTS:
            self._suspend_within_one(comparator, start, end, opts)
            return
        while comparator.greater(end, start):
            idx, contains = self.find_first_ending_at_or_after(comparator, end)
            if not contains:
                raise TraceError(f"no elementary span at {end}")
            chunk_start = self.elementary_spans[idx].start
            if comparator.greater(start, chunk_start):
                chunk_start = start
            self._suspend_within_one(comparator, chunk_start, end, opts)
            if idx == 0:
                break
            end = self.elementary_spans[idx - 1].end

    def mark(
        self, comparator: Comparator, label: str, moment: Any, *args: MarkOption
    ) -> None:
        """Add a labelled mark at `moment`.

        The moment must lie in an elementary span unless CAN_FISSION_SUSPEND
        is given, in which case a zero-width elementary span is created for it.
        """
        opts = assemble_options(DEFAULT_MARK_OPTIONS, *args)
        idx, _ = self.find_first_ending_at_or_after(comparator, moment)
        if idx == len(self.elementary_spans):
            raise TraceError(f"cannot add mark at {moment}: moment lies after the span")
        marked = self.elementary_spans[idx]
        if not marked.contains(comparator, moment):
            if not opts & MarkOption.CAN_FISSION_SUSPEND:
                raise TraceError(
                    f"cannot add mark at {moment}: no elementary span at moment"
                )
            idx = self.create_instantaneous_within_suspend_at(comparator, moment)
            marked = self.elementary_spans[idx]
        insert_at = _first_index(
            marked.marks, lambda m: comparator.diff(moment, m.moment) <= 0
        )
        marked.marks.insert(insert_at, Mark(label=label, moment=moment))

    def simplify(self, comparator: Comparator) -> None:
        """Merge abutting elementary spans and drop empty interior ones.

        Only elementary spans with no intervening dependency are merged, and
        only zero-width interior ones with no dependencies and no marks are
        dropped.
        """
        ess = self.elementary_spans
        kept: List[ElementarySpan] = []
        last: Optional[ElementarySpan] = None
        final_idx = len(ess) - 1
        for idx, this in enumerate(ess):
            if (
                0 < idx < final_idx
                and comparator.equal(this.start, this.end)
                and this.incoming is None
                and this.outgoing is None
                and not this.marks
            ):
                continue
            if (
                last is not None
                and comparator.equal(last.end, this.start)
                and last.outgoing is None
                and this.incoming is None
            ):
                if this.outgoing is not None:
                    this.outgoing.replace_origin_elementary_span(this, last)
                last.end = this.end
                last.marks.extend(this.marks)
                continue
            if last is not None:
                this.predecessor = last
                last.successor = this
                kept.append(last)
            last = this
        if last is not None:
            last.successor = None
            kept.append(last)
        self.elementary_spans = kept