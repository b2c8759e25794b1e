"""
enqoy.engine.csv_export — Pairing CSV Exports
==============================================

Three exports back the workspace's Exports tab:

- **All assignments** — one row per assignment, full guest contact details.
- **Host sheet** — one restaurant, ordered by table then seat, with a short
  preamble the host can print.
- **Guest cards** — name, restaurant, table and seat for place cards.

Inputs are the camelCase JSON objects the pairing API returns.  Every field
is quoted; embedded quotes are doubled and embedded commas or newlines are
kept intact.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Mapping
from typing import Any

ALL_ASSIGNMENTS_HEADERS = [
    "Guest First Name",
    "Guest Last Name",
    "Email",
    "Phone",
    "Restaurant",
    "Table",
    "Seat Number",
    "Dietary Notes",
    "Tags",
]

HOST_SHEET_HEADERS = [
    "Table Name",
    "Seat Number",
    "Guest Name",
    "Email",
    "Phone",
    "Dietary Notes",
    "Tags",
]

GUEST_CARD_HEADERS = ["Guest Name", "Restaurant", "Table", "Seat Number"]

TAG_SEPARATOR = "|"


def _writer(buf: io.StringIO) -> Any:
    return csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")


def encode_rows(headers: list[str], rows: Iterable[list[str]]) -> str:
    buf = io.StringIO()
    writer = _writer(buf)
    writer.writerow(headers)
    writer.writerows(rows)
    return buf.getvalue()


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _tags(guest: Mapping[str, Any] | None) -> str:
    if not guest:
        return ""
    return TAG_SEPARATOR.join(str(t) for t in guest.get("tags") or [])


def _guest_name(guest: Mapping[str, Any] | None) -> str:
    if not guest:
        return " "
    return f"{_text(guest.get('firstName'))} {_text(guest.get('lastName'))}"


class _Lookup:
    """Index guests, restaurants and tables by id."""

    def __init__(
        self,
        guests: Iterable[Mapping[str, Any]],
        restaurants: Iterable[Mapping[str, Any]],
    ) -> None:
        self.guests = {g["id"]: g for g in guests}
        self.restaurants = {r["id"]: r for r in restaurants}
        self.tables: dict[str, Mapping[str, Any]] = {}
        for r in self.restaurants.values():
            for t in r.get("tables") or []:
                self.tables[t["id"]] = t

    def guest(self, a: Mapping[str, Any]) -> Mapping[str, Any] | None:
        return self.guests.get(a.get("guestId"))

    def restaurant(self, a: Mapping[str, Any]) -> Mapping[str, Any] | None:
        return self.restaurants.get(a.get("restaurantId"))

    def table_name(self, a: Mapping[str, Any]) -> str:
        table = self.tables.get(a.get("tableId"))
        return _text(table.get("name")) if table else ""


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------
def export_all_assignments(
    guests: Iterable[Mapping[str, Any]],
    restaurants: Iterable[Mapping[str, Any]],
    assignments: Iterable[Mapping[str, Any]],
) -> str:
    lookup = _Lookup(guests, restaurants)
    rows = []
    for a in assignments:
        guest = lookup.guest(a) or {}
        restaurant = lookup.restaurant(a) or {}
        rows.append([
            _text(guest.get("firstName")),
            _text(guest.get("lastName")),
            _text(guest.get("email")),
            _text(guest.get("phone")),
            _text(restaurant.get("name")),
            lookup.table_name(a),
            _text(a.get("seatNumber")),
            _text(guest.get("dietaryNotes")),
            _tags(guest),
        ])
    return encode_rows(ALL_ASSIGNMENTS_HEADERS, rows)


def export_host_sheet(
    restaurant: Mapping[str, Any],
    guests: Iterable[Mapping[str, Any]],
    assignments: Iterable[Mapping[str, Any]],
) -> str:
    """Per-restaurant sheet, ordered by table name then seat number."""
    lookup = _Lookup(guests, [restaurant])
    mine = [a for a in assignments if a.get("restaurantId") == restaurant["id"]]
    mine.sort(key=lambda a: (lookup.table_name(a), a.get("seatNumber") or 0))

    buf = io.StringIO()
    writer = _writer(buf)
    writer.writerow([f"Restaurant: {_text(restaurant.get('name'))}"])
    writer.writerow([f"Address: {restaurant.get('address') or 'N/A'}"])
    writer.writerow([f"Total Guests: {len(mine)}"])
    writer.writerow([])
    writer.writerow(HOST_SHEET_HEADERS)
    for a in mine:
        guest = lookup.guest(a) or {}
        writer.writerow([
            lookup.table_name(a),
            _text(a.get("seatNumber")),
            _guest_name(guest),
            _text(guest.get("email")),
            _text(guest.get("phone")),
            _text(guest.get("dietaryNotes")),
            _tags(guest),
        ])
    return buf.getvalue()


def export_guest_cards(
    guests: Iterable[Mapping[str, Any]],
    restaurants: Iterable[Mapping[str, Any]],
    assignments: Iterable[Mapping[str, Any]],
) -> str:
    lookup = _Lookup(guests, restaurants)
    rows = []
    for a in assignments:
        restaurant = lookup.restaurant(a) or {}
        rows.append([
            _guest_name(lookup.guest(a)),
            _text(restaurant.get("name")),
            lookup.table_name(a),
            _text(a.get("seatNumber")),
        ])
    return encode_rows(GUEST_CARD_HEADERS, rows)


def export_filename(event_name: str, kind: str, restaurant_name: str | None = None) -> str:
    """``<event>_all_assignments.csv``, ``<event>_<restaurant>_host_sheet.csv`` …"""
    if restaurant_name:
        return f"{event_name}_{restaurant_name}_{kind}.csv"
    return f"{event_name}_{kind}.csv"
