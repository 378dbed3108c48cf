"""Per-accession coverage tracks built from BLAST hits.

A coverage track answers, for any half-open range [start, end) on one
accession, how many alignment records cover each position. Positions beyond
the furthest alignment end count as zero.

Two representations give identical answers:
- DenseCoverage: one int64 counter per position, grown as hits arrive.
- EventCoverage: +1/-1 events at hit boundaries, turned into piecewise
  constant segments by a prefix sum on first query. Memory scales with the
  number of hits rather than the accession length.
"""

from collections.abc import Iterable

import numpy as np
import structlog

from blast_intersections.genomes.models import AlignmentRecord

logger = structlog.get_logger()


class CoverageTrack:
    """Base coverage track for one (genome, accession).

    Attributes:
        length: Largest alignment end seen (0 for a new track)
    """

    def __init__(self):
        self.length = 0
        self._starts: list[int] = []
        self._ends: list[int] = []
        self._sorted_bounds: tuple[np.ndarray, np.ndarray] | None = None

    def add(self, start: int, end: int) -> None:
        """Add one alignment covering [start, end). Empty ranges are ignored."""
        if end <= start:
            return
        self._starts.append(start)
        self._ends.append(end)
        self._sorted_bounds = None
        if end > self.length:
            self.length = end
        self._accumulate(start, end)

    def _accumulate(self, start: int, end: int) -> None:
        raise NotImplementedError

    def values(self) -> np.ndarray:
        """Dense per-position coverage of length self.length."""
        raise NotImplementedError

    def breadth(self, start: int, end: int) -> int:
        """Number of positions in [start, end) covered at least once."""
        raise NotImplementedError

    def depth(self, start: int, end: int) -> int:
        """Sum of coverage over [start, end)."""
        raise NotImplementedError

    def hits(self, start: int, end: int) -> int:
        """Number of alignments overlapping [start, end).

        An alignment [a, b) overlaps iff a < end and b > start. Since a < b,
        every alignment with b <= start also has a < end, so the count is
        #(a < end) - #(b <= start).
        """
        if end <= start or not self._starts:
            return 0
        if self._sorted_bounds is None:
            self._sorted_bounds = (
                np.sort(np.asarray(self._starts, dtype=np.int64)),
                np.sort(np.asarray(self._ends, dtype=np.int64)),
            )
        starts, ends = self._sorted_bounds
        begun = np.searchsorted(starts, end, side="left")
        finished = np.searchsorted(ends, start, side="right")
        return int(begun - finished)

    def total(self) -> int:
        """Sum of all increments; equals the summed length of non-empty hits."""
        return int(self.values().sum())

    def count(self, start: int, end: int, policy: str = "breadth") -> int:
        """Reduce [start, end) to a single count under the given policy.

        Raises:
            ValueError: If policy is not breadth, depth or hits
        """
        if policy == "breadth":
            return self.breadth(start, end)
        if policy == "depth":
            return self.depth(start, end)
        if policy == "hits":
            return self.hits(start, end)
        raise ValueError(f"Unknown count policy: {policy}")

    def __len__(self) -> int:
        return self.length


class DenseCoverage(CoverageTrack):
    """Coverage stored as one counter per position."""

    def __init__(self):
        super().__init__()
        self._depth = np.zeros(0, dtype=np.int64)

    def _accumulate(self, start: int, end: int) -> None:
        if end > len(self._depth):
            # Amortized growth; positions past self.length stay zero
            grown = np.zeros(max(end, 2 * len(self._depth)), dtype=np.int64)
            grown[:len(self._depth)] = self._depth
            self._depth = grown
        self._depth[start:end] += 1

    def _window(self, start: int, end: int) -> np.ndarray:
        end = min(end, self.length)
        if end <= start:
            return self._depth[:0]
        return self._depth[start:end]

    def values(self) -> np.ndarray:
        return self._depth[:self.length].copy()

    def breadth(self, start: int, end: int) -> int:
        return int(np.count_nonzero(self._window(start, end)))

    def depth(self, start: int, end: int) -> int:
        return int(self._window(start, end).sum())


class EventCoverage(CoverageTrack):
    """Coverage stored as sorted boundary events with a prefix sum."""

    def __init__(self):
        super().__init__()
        self._segments: tuple[np.ndarray, np.ndarray, np.ndarray] | None = None

    def _accumulate(self, start: int, end: int) -> None:
        self._segments = None

    def _build_segments(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Segment i spans [seg_starts[i], seg_ends[i]) at constant depth[i]."""
        if self._segments is None:
            starts = np.asarray(self._starts, dtype=np.int64)
            ends = np.asarray(self._ends, dtype=np.int64)
            breakpoints = np.unique(np.concatenate([starts, ends]))
            delta = np.zeros(len(breakpoints), dtype=np.int64)
            np.add.at(delta, np.searchsorted(breakpoints, starts), 1)
            np.add.at(delta, np.searchsorted(breakpoints, ends), -1)
            depth = np.cumsum(delta)
            self._segments = (breakpoints[:-1], breakpoints[1:], depth[:-1])
        return self._segments

    def _overlaps(self, start: int, end: int) -> tuple[np.ndarray, np.ndarray]:
        """Overlap length with [start, end) and depth of every segment touching it."""
        seg_starts, seg_ends, depth = self._build_segments()
        first = np.searchsorted(seg_ends, start, side="right")
        last = np.searchsorted(seg_starts, end, side="left")
        overlap = (
            np.minimum(seg_ends[first:last], end)
            - np.maximum(seg_starts[first:last], start)
        )
        return np.clip(overlap, 0, None), depth[first:last]

    def values(self) -> np.ndarray:
        dense = np.zeros(self.length, dtype=np.int64)
        for seg_start, seg_end, seg_depth in zip(*self._build_segments()):
            dense[seg_start:seg_end] = seg_depth
        return dense

    def breadth(self, start: int, end: int) -> int:
        if end <= start:
            return 0
        overlap, depth = self._overlaps(start, end)
        return int(overlap[depth > 0].sum())

    def depth(self, start: int, end: int) -> int:
        if end <= start:
            return 0
        overlap, depth = self._overlaps(start, end)
        return int((overlap * depth).sum())


TRACK_TYPES: dict[str, type[CoverageTrack]] = {
    "dense": DenseCoverage,
    "events": EventCoverage,
}


def build_coverage(
    alignments: Iterable[AlignmentRecord],
    representation: str = "dense",
) -> dict[str, CoverageTrack]:
    """Consume one genome's alignment stream into per-accession coverage tracks.

    Every accession seen gets a track, even if all of its hits are empty
    ranges.

    Args:
        alignments: Single-pass stream of AlignmentRecords
        representation: "dense" or "events"

    Returns:
        Mapping of accession to coverage track

    Raises:
        ValueError: If representation is not recognized
    """
    track_type = TRACK_TYPES.get(representation)
    if track_type is None:
        raise ValueError(f"Unknown coverage representation: {representation}")

    tracks: dict[str, CoverageTrack] = {}
    record_count = 0
    for record in alignments:
        track = tracks.get(record.accession)
        if track is None:
            track = tracks[record.accession] = track_type()
        track.add(record.start, record.end)
        record_count += 1

    logger.debug(
        "coverage_built",
        representation=representation,
        accession_count=len(tracks),
        record_count=record_count,
    )
    return tracks
