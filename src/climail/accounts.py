"""Loading of the YAML account file."""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import Account

logger = logging.getLogger(__name__)


class AccountFileError(ValueError):
    """Raised when the account file cannot be read or is malformed."""


def load_accounts(path: Path) -> list[Account]:
    """Load the account list from a YAML file.

    The file holds a list of mappings with ``pop3_domain`` or
    ``imap_domain``, ``smtp_domain``, ``name``, ``password`` and an
    optional ``shortcut``.

    Args:
        path: Path to the account file

    Returns:
        list[Account]: Accounts in file order

    Raises:
        AccountFileError: If the file is missing, not valid YAML, or holds
            an invalid account record
    """
    path = Path(path).expanduser()
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise AccountFileError(f"Could not read account file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise AccountFileError(f"Could not parse account file {path}: {e}") from e

    if data is None:
        return []
    if not isinstance(data, list):
        raise AccountFileError(f"Account file {path} must contain a list of accounts")

    accounts = []
    for index, record in enumerate(data):
        try:
            accounts.append(Account.model_validate(record))
        except ValidationError as e:
            raise AccountFileError(f"Invalid account #{index} in {path}: {e}") from e

    logger.info(f"Loaded {len(accounts)} accounts from {path}")
    return accounts
