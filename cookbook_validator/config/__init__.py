"""Configuration for the pull-request validator.

Example:
    >>> from cookbook_validator.config import ValidatorSettings
    >>> settings = ValidatorSettings.from_yaml(".cookbook-validator.yaml")
    >>> settings.base_branch
    'master'
"""

from cookbook_validator.config.settings import ValidatorSettings

__all__ = ["ValidatorSettings"]
