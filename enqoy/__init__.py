"""
Enqoy — Curated Social Dining, Client & Pairing Service
========================================================
Members complete a personality assessment, book small-group dinners and
watch the event details unlock as the date approaches.  Admins run the
pairing workspace that seats guests at restaurant tables.

Package layout::

    enqoy/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Roles, statuses, countdown windows, categories
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   └── models.py      # Pairing ORM models
    ├── engine/
    │   ├── assessment.py  # Wizard steps, validation, age/city derivation
    │   ├── debounce.py    # Cancelling debouncer (autosave, search)
    │   ├── reveal.py      # Countdown reveal policy + QA time travel
    │   ├── credits.py     # Credit ledger read model
    │   ├── csv_export.py  # Pairing CSV exports
    │   ├── personality.py # Assessment → personality category scoring
    │   ├── grouping.py    # Constraint-aware group generation
    │   └── distribution.py # Groups → restaurants/tables/seats
    ├── services/
    │   └── pairing_service.py # Pairing persistence, lock snapshots, audit
    ├── client/
    │   ├── http.py        # httpx client, bearer token, 401 logout
    │   ├── storage.py     # Persisted auth_token / user
    │   ├── endpoints/     # One wrapper per REST root
    │   ├── sdk.py         # EnqoyApi aggregate
    │   ├── auth.py        # AuthContext
    │   ├── routing.py     # Route guards
    │   ├── wizard.py      # Assessment wizard state machine
    │   ├── event_detail.py # Reveal + booking / cancel / reschedule
    │   ├── workspace.py   # Admin pairing workspace
    │   ├── search.py      # Debounced admin search
    │   └── notify.py      # Toast recorder
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # JWT admin guard, engine, config
        └── routes/
            └── pairing.py # /api/pairing/* endpoints
"""

__version__ = "0.1.0"
