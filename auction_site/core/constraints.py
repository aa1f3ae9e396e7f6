class DomainConstraints:
    """Length and range limits shared by validation schemas and ORM columns"""

    MIN_SITE_NAME = 1
    MAX_SITE_NAME = 128

    MIN_TIMEZONE = -12
    MAX_TIMEZONE = 12

    MIN_USERNAME = 3
    MAX_USERNAME = 64

    MIN_PASSWORD = 4
