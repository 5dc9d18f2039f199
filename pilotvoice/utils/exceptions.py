"""Domain exceptions raised by the service layer."""


class SurveyNotFoundError(Exception):
    """Raised when a survey does not exist."""

    def __init__(self, survey_ref: int | str):
        if isinstance(survey_ref, str):
            message = f'Survey with slug "{survey_ref}" not found'
        else:
            message = f"Survey with id {survey_ref} not found"
        super().__init__(message)
        self.survey_ref = survey_ref


class DuplicateSurveyResponseError(Exception):
    """Raised when a user already has a response for a survey."""

    def __init__(self, survey_id: int, user_id):
        super().__init__(f"User {user_id} has already created a response for survey {survey_id}")
        self.survey_id = survey_id
        self.user_id = user_id


class SurveyResponseNotFoundError(Exception):
    """Raised when a survey response does not exist."""

    def __init__(self, response_id: int):
        super().__init__(f"Survey response with id {response_id} not found")
        self.response_id = response_id


class SurveyResponseForbiddenError(Exception):
    """Raised when a user tries to modify a response owned by someone else."""

    def __init__(self):
        super().__init__("You can only update your own survey responses")
