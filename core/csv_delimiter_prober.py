import csv
import logging
from collections import Counter
from typing import List, Optional, Sequence, TextIO

import chardet

from core.exceptions import DelimiterProbeError
from core.models import DelimiterCandidate

logger = logging.getLogger(__name__)

DEFAULT_CANDIDATES = (',', ';', '\t', '|')


def decode_buffer(data: bytes) -> str:
    """Decode a raw buffer, guessing the encoding when it is not UTF-8."""
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError:
        pass

    result = chardet.detect(data)
    encoding = result.get('encoding')
    if encoding and (result.get('confidence') or 0) > 0.7:
        logger.debug(f"Buffer is not UTF-8, decoding as {encoding} (confidence {result['confidence']:.2f})")
        try:
            return data.decode(encoding, errors='replace')
        except LookupError:
            logger.warning(f"Unknown encoding guessed for buffer: {encoding}")

    logger.warning("Encoding detection failed, decoding as UTF-8 with replacement")
    return data.decode('utf-8', errors='replace')


class CSVDelimiterProber:
    """Rank candidate field delimiters for a CSV sample.

    Each candidate gets a probability: the share of non-empty sample lines that
    it splits into the modal number of fields (more than one). Equal
    probabilities are ordered by the csv.Sniffer pick first, then by the
    candidate order, so identical input always ranks identically.
    """

    def __init__(self, candidates: Sequence[str] = DEFAULT_CANDIDATES, sample_lines: int = 20):
        if not candidates:
            raise ValueError("At least one delimiter candidate is required")
        self.candidates = tuple(candidates)
        self.sample_lines = sample_lines

    def probe(self, reader: TextIO) -> List[DelimiterCandidate]:
        try:
            lines = [reader.readline() for _ in range(self.sample_lines)]
        except (OSError, UnicodeError) as e:
            logger.error(f"Reading CSV sample failed: {e}")
            raise DelimiterProbeError(f"Cannot read CSV sample: {e}") from e

        sample = ''.join(lines)
        rows = [line.rstrip('\r\n') for line in lines if line.strip()]
        sniffed = self._sniff(sample)

        scored = [
            DelimiterCandidate(delimiter=d, probability=self._score(rows, d))
            for d in self.candidates
        ]
        order = {d: i for i, d in enumerate(self.candidates)}
        ranked = sorted(
            scored,
            key=lambda c: (-c.probability, c.delimiter != sniffed, order[c.delimiter]),
        )
        logger.debug(f"Delimiter ranking: {[(c.delimiter, round(c.probability, 3)) for c in ranked]}")
        return ranked

    def _sniff(self, sample: str) -> Optional[str]:
        if not sample.strip():
            return None
        try:
            dialect = csv.Sniffer().sniff(sample, delimiters=''.join(self.candidates))
        except csv.Error:
            return None
        return dialect.delimiter if dialect.delimiter in self.candidates else None

    @staticmethod
    def _score(rows: List[str], delimiter: str) -> float:
        if not rows:
            return 0.0
        counts = Counter(row.count(delimiter) for row in rows)
        modal, hits = max(counts.items(), key=lambda kv: (kv[1], kv[0]))
        if modal == 0:
            return 0.0
        return hits / len(rows)
