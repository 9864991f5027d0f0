"""
Tidy NDVI time series from the wide zonal table.

Turns one-row-per-region, one-column-per-layer output into one row per
(region, date) observation, ready for plotting.
"""

import logging
import re
from collections.abc import Iterator
from datetime import date
from typing import NamedTuple

import pandas as pd

from ndviseries.core.exceptions import DateParseError
from ndviseries.core.zonal import LABEL_COLUMN, REGION_COLUMN

logger = logging.getLogger(__name__)

TIDY_COLUMNS = [REGION_COLUMN, LABEL_COLUMN, "date", "value"]

# YYYYMMDD, or YYYY?MM?DD with one repeated delimiter
_LAYER_DATE = re.compile(r"(?<!\d)(\d{4})([-_./]?)(\d{2})\2(\d{2})(?!\d)")


class ZonalRecord(NamedTuple):
    """One observation: mean NDVI of a region on a date (NaN if undefined)."""

    region: str
    label: str
    date: date
    value: float


def parse_layer_date(name: str) -> date:
    """
    Parse the date encoded in a layer label.

    Examples:
        >>> parse_layer_date("20180612")
        datetime.date(2018, 6, 12)
        >>> parse_layer_date("ndvi_2019-07-01")
        datetime.date(2019, 7, 1)

    Raises:
        DateParseError: If the label has no date or an impossible one
    """
    m = _LAYER_DATE.search(str(name))
    if m is None:
        raise DateParseError(f"Column {name!r} does not encode a YYYYMMDD date")
    year, _, month, day = m.groups()
    try:
        return date(int(year), int(month), int(day))
    except ValueError as e:
        raise DateParseError(f"Column {name!r} encodes an invalid date: {e}") from e


def to_tidy(
    wide: pd.DataFrame,
    id_column: str = REGION_COLUMN,
    label_column: str = LABEL_COLUMN,
    sort: bool = False,
) -> pd.DataFrame:
    """
    Reshape the wide zonal table into region, label, date, value rows.

    Every column other than the identity columns must encode a date; none
    is dropped silently.

    Args:
        wide: Output of ``zonal_means``
        id_column: Region identifier column
        label_column: Vegetation label column
        sort: Order rows by (region, date) ascending

    Returns:
        DataFrame with columns region, label, date, value. Without
        ``sort``, rows run region by region in column order.

    Raises:
        DateParseError: On the first layer column without a valid date
    """
    for column in (id_column, label_column):
        if column not in wide.columns:
            raise KeyError(f"Wide table has no {column!r} column")

    layer_columns = [c for c in wide.columns if c not in (id_column, label_column)]
    dates = {column: parse_layer_date(column) for column in layer_columns}

    tidy = wide.melt(
        id_vars=[id_column, label_column],
        value_vars=layer_columns,
        var_name="layer",
        value_name="value",
    )
    # melt stacks column by column; regroup by region keeping row order
    tidy["_row"] = tidy.groupby("layer", sort=False).cumcount()
    tidy["_col"] = tidy["layer"].map({c: i for i, c in enumerate(layer_columns)})
    tidy = tidy.sort_values(["_row", "_col"], kind="stable")

    tidy["date"] = tidy["layer"].map(dates)
    tidy = tidy.rename(columns={id_column: REGION_COLUMN, label_column: LABEL_COLUMN})
    tidy = tidy[TIDY_COLUMNS].astype({"value": "float64"})

    if sort:
        tidy = tidy.sort_values([REGION_COLUMN, "date"], kind="stable")

    logger.debug("Reshaped %d regions x %d layers", len(wide), len(layer_columns))
    return tidy.reset_index(drop=True)


def to_records(tidy: pd.DataFrame) -> Iterator[ZonalRecord]:
    """Yield ZonalRecord tuples from a tidy table."""
    for row in tidy[TIDY_COLUMNS].itertuples(index=False):
        yield ZonalRecord(
            region=str(row[0]), label=str(row[1]), date=row[2], value=float(row[3])
        )
