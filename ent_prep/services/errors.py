# ent_prep/services/errors.py


class DuplicateUserError(ValueError):
    pass


class InvalidCredentialsError(ValueError):
    pass


class NotFoundError(ValueError):
    pass


class InvalidAttemptError(ValueError):
    pass
