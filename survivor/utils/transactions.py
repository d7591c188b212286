"""
Unit-of-work helper

Compound operations (pick upsert plus history, matchweek activation, match
finalization) run inside unit_of_work so they either commit as a whole or
leave the store untouched.
"""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from survivor import db
from survivor.errors import Conflict, Internal, PoolError

logger = logging.getLogger(__name__)


def _describe(context):
    return " ".join(f"{k}={v}" for k, v in sorted(context.items()))


@contextmanager
def unit_of_work(operation, **context):
    """
    Run a block as one transaction.

    Args:
        operation: Operation name, used in log messages
        **context: Ids involved, logged on failure
    """
    try:
        yield db.session
        db.session.commit()
    except PoolError:
        db.session.rollback()
        raise
    except IntegrityError as e:
        db.session.rollback()
        logger.warning(f"{operation} violated a constraint [{_describe(context)}]: {e.orig}")
        raise Conflict("Conflicting data, please retry", **context) from e
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"{operation} failed [{_describe(context)}]: {e}", exc_info=True)
        raise Internal(operation=operation, **context) from e
    except Exception:
        db.session.rollback()
        logger.error(f"{operation} failed unexpectedly [{_describe(context)}]", exc_info=True)
        raise
