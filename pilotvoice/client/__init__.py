"""Python client for filling in surveys against the PilotVoice API."""
from pilotvoice.client.api_client import SurveyApiClient, SurveyApiError
from pilotvoice.client.autosave import Draft, SaveStatus, SurveyAutoSaver
from pilotvoice.client.fill_flow import FlowState, SurveyFillFlow
from pilotvoice.client.survey_start import StartAction, SurveyStart, build_sign_in_url, resolve_start_action

__all__ = [
    "Draft",
    "FlowState",
    "SaveStatus",
    "StartAction",
    "SurveyApiClient",
    "SurveyApiError",
    "SurveyAutoSaver",
    "SurveyFillFlow",
    "SurveyStart",
    "build_sign_in_url",
    "resolve_start_action",
]
