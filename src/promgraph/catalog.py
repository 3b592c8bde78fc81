"""Loading a whole set of rule files at once."""

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Union

from .errors import CompoundError, PromgraphError
from .rulefmt import RuleGroup, load_rule_file

logger = logging.getLogger(__name__)

Loader = Callable[[Union[str, Path]], List[RuleGroup]]


def load_rule_files(paths: Iterable[Union[str, Path]], loader: Loader = load_rule_file) -> List[RuleGroup]:
    """
    Load every rule file and return all their groups, in file order.

    A broken file does not stop the others from being read, so every
    problem is reported in one go. If any file failed, nothing is
    returned: the collected errors are raised as one CompoundError.
    """
    groups: List[RuleGroup] = []
    errors = CompoundError()

    for path in paths:
        try:
            loaded = loader(path)
        except PromgraphError as err:
            logger.debug("Failed to load %s", path)
            errors.accumulate(err)
            continue
        groups.extend(loaded)

    if errors.has_errors():
        logger.error("Found %d problem(s) in rule files", len(errors.errors))
        raise errors

    logger.debug("Loaded %d rule group(s)", len(groups))
    return groups
