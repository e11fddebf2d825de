"""Presence Ledger package.

Organized by feature modules (identities, ledger, attendance, summary, ...) with
service/repository layers and a thin Flask controller layer on top.
The public entry point for collaborators is :class:`presence.PresenceLedger`.
"""
