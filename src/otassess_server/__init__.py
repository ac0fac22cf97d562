"""otassess_server: FastAPI REST API for the assessment SDK.

Exposes clients, assessments, per-question responses, the assessment
wizard, billing, equipment, documents, house maps and the AI-assisted
features as an HTTP API scoped to the calling practitioner.
"""
