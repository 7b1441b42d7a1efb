"""Traffic dashboard logic (UI-agnostic).

This package contains:
- row normalization and pasted-text ingestion (CSV / JSON)
- date windowing, totals and period-over-period deltas
- chart series shaping and chart helpers (Altair -> Vega-Lite spec dict)
- sample data loading and the GA4 demo report
"""
