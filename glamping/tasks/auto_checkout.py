import logging
from glamping.services.state_service import get_resort_state_service

logger = logging.getLogger(__name__)


def run_auto_checkout_sweep():
    """Scheduled job: check out rooms past the cutoff on their check-out day.

    Reads the state at fire time, never a snapshot captured at scheduling.
    """
    try:
        outcome = get_resort_state_service().run_auto_sweep()
        if outcome.swept_codes:
            logger.info(f"Auto check-out swept {len(outcome.swept_codes)} rooms")
        return outcome.swept_codes
    except Exception as e:
        logger.error(f"Error in auto check-out sweep: {str(e)}")
        return []
