"""Attendance Sync package.

Reconciles biometric terminal punches and time-tracking timers into one
attendance workbook row per employee per day, organised by feature module
(ledger, sync, device, tracking, ...) with a thin Flask controller layer.
"""
