"""Carecheck services.

Service boundaries:
- safety_service: Crisis-language detection, runs on every free-text input
- assessment_service: PHQ-9 / GAD-7 scoring, questionnaire flow and trends
- response_service: Merges detection and severity into one caller payload

All services hash user identifiers with hash_pii() before logging and
never log raw message text.
"""
