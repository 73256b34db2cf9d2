"""
CSV export and import functionality for Trip Splitter

The layout is the one the trip spreadsheet uses:

    Balance:,<blank per family>,<name>,<$net> per family,,,,Instructions:
    Date,Description,Currency,Amount,Paid By,<name>,"" per family,Amount in CAD,Total Beneficiaries,,
    ,,,,,People,Share per family,,,,
    2024-07-01,Dinner,CAD,100.00,Smith,1,50.00,1,50.00,100.00,2,,
"""
from __future__ import annotations
import csv
import io
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from computations import activity_shares, reconcile, total_participants
from currency import DEFAULT_CONVERTER, CurrencyConverter, format_amount, format_signed_amount
from errors import FormatError, NoDataError
from models import Activity, Currency, Family, Participant
from utils import new_id, parse_amount, parse_any_date, parse_count, today_str

logger = logging.getLogger(__name__)

BALANCE_LABEL = "Balance:"
INSTRUCTIONS_LABEL = "Instructions:"
BASE_HEADERS = ["Date", "Description", "Currency", "Amount", "Paid By"]
CANONICAL_TOTAL_HEADER = "Amount in CAD"
TRAILING_HEADERS = [CANONICAL_TOTAL_HEADER, "Total Beneficiaries", "", ""]
FAMILY_COLUMNS_START = len(BASE_HEADERS)


class UnknownFamilyPolicy(str, Enum):
    """What to do with a payer name that is not a header family"""
    CREATE = "create"
    REJECT = "reject"


@dataclass
class SkippedRow:
    """A data row dropped during import, and why"""
    line_number: int  # 1-based, counting non-blank records only
    reason: str


@dataclass
class CsvImport:
    """Result of parsing an exported trip CSV"""
    families: List[Family]
    activities: List[Activity]
    skipped: List[SkippedRow] = field(default_factory=list)


# ---------- Export ----------

def _family_names(families: Sequence[Family]) -> Dict[str, str]:
    return {f.id: f.name for f in families}


def build_rows(
    families: List[Family],
    activities: List[Activity],
    converter: CurrencyConverter = DEFAULT_CONVERTER,
) -> List[List[str]]:
    """
    Build the exported cells row by row.
    Raises NoDataError if there are no families or no activities.
    """
    if not families or not activities:
        raise NoDataError(
            "Nothing to export: need at least one family and one activity",
            {"families": len(families), "activities": len(activities)},
        )

    names = _family_names(families)
    results = reconcile(families, activities, converter)

    balance_row = [BALANCE_LABEL] + [""] * len(families)
    for r in results:
        balance_row += [r.family_name, format_signed_amount(r.net_amount)]
    balance_row += ["", "", "", INSTRUCTIONS_LABEL]

    header_row = list(BASE_HEADERS)
    for f in families:
        header_row += [f.name, ""]
    header_row += TRAILING_HEADERS

    sub_header_row = [""] * len(BASE_HEADERS)
    for _ in families:
        sub_header_row += ["People", "Share"]
    sub_header_row += [""] * len(TRAILING_HEADERS)

    rows = [balance_row, header_row, sub_header_row]
    for a in activities:
        shares = activity_shares(a, converter)
        row = [
            a.date,
            a.name,
            a.currency.value,
            format_amount(a.cost),
            names.get(a.paid_by, ""),
        ]
        for f in families:
            row += [str(a.participant_count(f.id)), format_amount(shares.get(f.id, 0.0))]
        row += [
            format_amount(converter.to_canonical(a.cost, a.currency)),
            str(total_participants(a)),
            "",
            "",
        ]
        rows.append(row)
    return rows


def trip_to_csv(
    families: List[Family],
    activities: List[Activity],
    converter: CurrencyConverter = DEFAULT_CONVERTER,
    legacy_unquoted: bool = False,
) -> str:
    """
    Render families and activities as CSV text.

    Fields containing commas or quotes are quoted so the text reads back
    intact. legacy_unquoted=True joins cells with bare commas instead,
    matching files produced by older versions of the app.
    """
    rows = build_rows(families, activities, converter)
    if legacy_unquoted:
        return "".join(",".join(row) + "\n" for row in rows)

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerows(rows)
    return buf.getvalue()


def export_trip_to_csv(
    families: List[Family],
    activities: List[Activity],
    filepath: str,
    **kwargs
) -> None:
    """Export families and activities to a CSV file"""
    text = trip_to_csv(families, activities, **kwargs)
    with open(filepath, "w", newline="", encoding="utf-8") as f:
        f.write(text)
    logger.info("Exported %d activities for %d families to %s",
                len(activities), len(families), filepath)


# ---------- Import ----------

@dataclass
class CsvRecord:
    """One non-blank CSV record, or the error that stopped it parsing"""
    number: int  # 1-based, counting non-blank records only
    cells: List[str]
    error: Optional[str] = None


def read_records(text: str) -> List[CsvRecord]:
    """
    Split CSV text into records, honouring quoted fields.

    Only \\n, \\r and \\r\\n end a record, and a quoted field may span lines.
    Surrounding whitespace and quotes are stripped from every field, and
    blank lines are dropped. A record the csv module rejects (an oversized
    field, for one) comes back with no cells and the error message.
    """
    reader = csv.reader(io.StringIO(text, newline=""), skipinitialspace=True)
    records: List[CsvRecord] = []
    while True:
        try:
            cells = next(reader)
        except StopIteration:
            break
        except csv.Error as ex:
            records.append(CsvRecord(len(records) + 1, [], str(ex)))
            continue
        if not cells or (len(cells) == 1 and not cells[0].strip()):
            continue
        records.append(CsvRecord(len(records) + 1, [c.strip().strip('"') for c in cells]))
    return records


def header_family_columns(header: List[str]) -> List[Tuple[int, str]]:
    """
    (column index, family name) for each family named in the header row.
    Family names sit on even offsets from column 5 up to the trailing
    "Amount in CAD" block; blank cells are skipped.
    """
    end = len(header) - 3
    if CANONICAL_TOTAL_HEADER in header[FAMILY_COLUMNS_START:]:
        end = header.index(CANONICAL_TOTAL_HEADER, FAMILY_COLUMNS_START)
    return [
        (i, header[i])
        for i in range(FAMILY_COLUMNS_START, end, 2)
        if header[i]
    ]


def _cell(values: List[str], i: int) -> str:
    return values[i] if i < len(values) else ""


class _RowParser:
    """Turns data rows into activities, growing the family list as needed"""

    def __init__(self, columns: List[Tuple[int, Family]], on_unknown_family: UnknownFamilyPolicy):
        self.columns = columns
        self.families: List[Family] = []
        for _, family in columns:
            if family not in self.families:
                self.families.append(family)
        self.on_unknown_family = UnknownFamilyPolicy(on_unknown_family)
        self.skipped: List[SkippedRow] = []

    def skip(self, line_number: int, reason: str) -> None:
        logger.info("Skipping line %d: %s", line_number, reason)
        self.skipped.append(SkippedRow(line_number, reason))

    def find_family(self, name: str) -> Optional[Family]:
        for f in self.families:
            if f.name == name:
                return f
        return None

    def resolve_payer(self, name: str) -> Optional[Family]:
        family = self.find_family(name)
        if family is None and self.on_unknown_family is UnknownFamilyPolicy.CREATE:
            logger.info("Creating new family for payer: %s", name)
            family = Family(id=new_id(), name=name)
            self.families.append(family)
        return family

    def parse(self, line_number: int, values: List[str]) -> Optional[Activity]:
        if len(values) < FAMILY_COLUMNS_START:
            self.skip(line_number, f"only {len(values)} fields")
            return None
        if not values[0]:
            self.skip(line_number, "empty date field")
            return None

        date_str, name, currency_str, cost_str, payer_name = values[:FAMILY_COLUMNS_START]
        if not name or not cost_str or not payer_name:
            self.skip(line_number, "missing description, amount or payer")
            return None

        cost = parse_amount(cost_str)
        if cost is None or cost < 0:
            self.skip(line_number, f"invalid amount {cost_str!r}")
            return None

        parsed_date = parse_any_date(date_str)
        if parsed_date is None:
            logger.warning("Invalid date %r for %r on line %d, using today", date_str, name, line_number)
            activity_date = today_str()
        else:
            activity_date = parsed_date.isoformat()

        payer = self.resolve_payer(payer_name)
        if payer is None:
            self.skip(line_number, f"unknown payer {payer_name!r}")
            return None

        counts: Dict[str, int] = {}
        for col, family in self.columns:
            count = parse_count(_cell(values, col))
            if count is not None and count > 0:
                counts[family.id] = counts.get(family.id, 0) + count
        participants = [Participant(family_id, count) for family_id, count in counts.items()]
        if not participants:
            self.skip(line_number, "no participants")
            return None

        return Activity(
            id=new_id(),
            name=name,
            cost=cost,
            currency=Currency.parse(currency_str),
            paid_by=payer.id,
            date=activity_date,
            participants=participants,
        )


def trip_from_csv(
    text: str,
    on_unknown_family: UnknownFamilyPolicy = UnknownFamilyPolicy.CREATE,
) -> CsvImport:
    """
    Parse CSV text in the exported layout.

    The balance row is informational and ignored; families are rebuilt
    from the header row with fresh ids. Rows that fail validation or that
    the csv module cannot read are dropped and reported in CsvImport.skipped.

    Raises FormatError if the three header rows are missing, the header
    row cannot be read or the header names no families.
    """
    records = read_records(text.lstrip("\ufeff"))
    if len(records) < 3:
        raise FormatError(
            "CSV must contain a balance row, a header row and a sub-header row",
            {"lines": len(records)},
        )

    if records[1].error:
        raise FormatError("Unreadable CSV header row", {"error": records[1].error})
    header = records[1].cells
    named_columns = header_family_columns(header)
    if not named_columns:
        raise FormatError("No family columns found in CSV header", {"header": header})

    by_name: Dict[str, Family] = {}
    columns = []
    for col, name in named_columns:
        if name not in by_name:
            by_name[name] = Family(id=new_id(), name=name)
        columns.append((col, by_name[name]))

    parser = _RowParser(columns, on_unknown_family)
    activities = []
    # records[2] is the People/Share sub-header
    for record in records[3:]:
        if record.error:
            parser.skip(record.number, f"unreadable row: {record.error}")
            continue
        activity = parser.parse(record.number, record.cells)
        if activity is not None:
            activities.append(activity)

    logger.info("Import complete: %d activities, %d families, %d rows skipped",
                len(activities), len(parser.families), len(parser.skipped))
    return CsvImport(families=parser.families, activities=activities, skipped=parser.skipped)


def import_trip_from_csv(filepath: str, **kwargs) -> CsvImport:
    """Import families and activities from a CSV file"""
    with open(filepath, "r", encoding="utf-8-sig", newline="") as f:
        return trip_from_csv(f.read(), **kwargs)
