"""
External Service Integrations
=============================

Adapters for the systems Reunify talks to: the Google Gemini REST API and the
local microphone.
"""
