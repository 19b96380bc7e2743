
DEFAULT_ERROR_LANGUAGE = "en"
ERRORS = {
    "not_authenticated": {
        "en": "You are not signed in. Please log in to continue",
        "fr": "Il semble que vous ne soyez pas connecté. Merci de bien vouloir vous connecter pour continuer"
    },
    "not_authorized": {
        "en": "You are not authorized. Please try again",
        "fr": "Il semble que vous ne soyez pas autorisés. Merci de bien vouloir réessayer"
    },
    "server_error": {
        "en": "An error occurred. Please try again later",
        "fr": "Il semble qu’une erreur soit survenue. Merci de bien vouloir réessayer plus tard."
    },
    "bad_request": {
        "en": "Invalid request. Please check and try again",
        "fr": "Il semble que votre demande soit invalide. Merci de vérifier et de réessayer"
    },
    "multiple_objects_returned": {
        "en": "{count} {model} returned. Please check your request"
    },
    "not_found": {
        "en": "{model} not found"
    },
    "concurrency_conflict": {
        "en": "{model} {id} was changed by someone else. Reload and try again"
    },

    # stock ledger
    "insufficient_quantity": {
        "en": "Insufficient quantity for {item_code}: requested {requested}, available {available}"
    },
    "invalid_quantity": {
        "en": "Invalid quantity: {quantity}"
    },
    "not_reversible": {
        "en": "Movement {movement_id} cannot be reversed: {reason}"
    },

    # work order lifecycle
    "stage_not_applicable": {
        "en": "Stage {stage} does not apply to work order {work_order_no}"
    },
    "stage_not_authorized": {
        "en": "Role {role} cannot complete stage {stage}"
    },
    "stage_already_completed": {
        "en": "Stage {stage} is already completed on work order {work_order_no}"
    },
    "previous_stage_incomplete": {
        "en": "Stage {stage} is waiting for {previous_stage} to complete"
    },
    "work_order_closed": {
        "en": "Work order {work_order_no} is {status} and can no longer change"
    },
    "work_order_locked": {
        "en": "Work order {work_order_no} has lifecycle progress, {fields} can no longer change"
    },
}
