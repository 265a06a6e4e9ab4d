"""Decoding of CSV text pages into typed records.

Decoding is permissive at the row level: a row that cannot be read (broken or
unterminated quoting) or does not validate against the record model is
dropped rather than failing the whole page. Only an unreadable header row is
raised.
"""

import csv
import io
import logging
from collections.abc import Callable

from pydantic import BaseModel, ValidationError

from ..exceptions import DeserializationError

logger = logging.getLogger("finra_client.operations.decoding")

type PageDecoder[T] = Callable[[str], list[T]]


def decode_text_page[M: BaseModel](text: str, model: type[M]) -> list[M]:
    """Decode one CSV page with a header row into ``model`` instances.

    Args:
        text: The raw response body.
        model: The pydantic model each row is validated against.

    Returns:
        The successfully decoded records, in body order.

    Raises:
        DeserializationError: If the header row cannot be parsed as CSV.

    """
    reader = csv.DictReader(io.StringIO(text, newline=""), strict=True)
    try:
        fieldnames = reader.fieldnames
    except csv.Error as exc:
        msg = f"could not deserialize response at line {reader.line_num}: {exc}"
        raise DeserializationError(msg) from exc
    if fieldnames is None:
        return []

    records: list[M] = []
    dropped = 0
    while True:
        # Strict quoting turns a row cut off inside a quoted cell into an error
        # instead of a shortened value; the reader resumes on the next line.
        try:
            row = next(reader)
        except StopIteration:
            break
        except csv.Error as exc:
            dropped += 1
            logger.debug("Dropping unreadable row at line %d: %s", reader.line_num, exc)
            continue
        # Cells beyond the header width land under the ``None`` key
        if None in row:
            dropped += 1
            continue
        try:
            records.append(model.model_validate(row))
        except ValidationError as exc:
            dropped += 1
            logger.debug("Dropping row %d: %s", reader.line_num, exc.errors(include_url=False))

    if dropped:
        logger.debug("Dropped %d malformed row(s) out of %d", dropped, dropped + len(records))
    return records


def text_page_decoder[M: BaseModel](model: type[M]) -> PageDecoder[M]:
    """Return a page decoder bound to ``model``."""

    def decode(text: str) -> list[M]:
        return decode_text_page(text, model)

    return decode


__all__ = ["PageDecoder", "decode_text_page", "text_page_decoder"]
