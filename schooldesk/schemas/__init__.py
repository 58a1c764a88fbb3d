"""Pydantic schemas for IPC payloads, records and response envelopes."""
