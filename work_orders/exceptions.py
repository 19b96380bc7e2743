from configurations.base_features.exceptions.base_exceptions import LocalBaseException


class WorkOrderLifecycleError(LocalBaseException):
    """Base class for refused work order lifecycle operations"""
    exception_type = None
    status_code = 400

    def __init__(self, **kwargs):
        super().__init__(
            exception_type=self.exception_type,
            status_code=self.status_code,
            kwargs=kwargs,
        )


class StageNotApplicableError(WorkOrderLifecycleError):
    exception_type = "stage_not_applicable"
    status_code = 400

    def __init__(self, stage, work_order_no):
        super().__init__(stage=stage, work_order_no=work_order_no)


class StageNotAuthorizedError(WorkOrderLifecycleError):
    exception_type = "stage_not_authorized"
    status_code = 403

    def __init__(self, stage, role):
        super().__init__(stage=stage, role=role or "anonymous")


class StageAlreadyCompletedError(WorkOrderLifecycleError):
    exception_type = "stage_already_completed"
    status_code = 409

    def __init__(self, stage, work_order_no):
        super().__init__(stage=stage, work_order_no=work_order_no)


class PreviousStageIncompleteError(WorkOrderLifecycleError):
    exception_type = "previous_stage_incomplete"
    status_code = 409

    def __init__(self, stage, previous_stage):
        super().__init__(stage=stage, previous_stage=previous_stage)


class WorkOrderClosedError(WorkOrderLifecycleError):
    exception_type = "work_order_closed"
    status_code = 409

    def __init__(self, work_order_no, status):
        super().__init__(work_order_no=work_order_no, status=status)


class WorkOrderLockedError(WorkOrderLifecycleError):
    exception_type = "work_order_locked"
    status_code = 409

    def __init__(self, work_order_no, fields):
        super().__init__(work_order_no=work_order_no, fields=", ".join(fields))
