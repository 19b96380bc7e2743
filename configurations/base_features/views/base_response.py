from rest_framework import status
from rest_framework.response import Response


class ResponseFormatterMixin(object):
    """
        A mixin for Django REST Framework API views that wraps every payload in the
        shared envelope: {"data": ..., "errors": ..., "meta_data": {...}}.
    """

    def format_response(self, data=None, errors=None, status_code=None, fields=None):
        """
            Formats a response based on data, errors, and status code.

            Args:
                data (Optional[List or Dict]): Data to include in the response.
                    - List: several objects (list endpoints, ledger projections).
                    - Dict: a single object or a structured result.
                errors (Optional[List or Dict]): Errors to include in the response.
                status_code (int, optional): The HTTP status code to use.
                fields (Optional[List]): field descriptors for dashboard tables.

            Returns:
                rest_framework.response.Response: The formatted response object.
        """

        if data and errors:
            # some data processed with errors
            response_data, status_code = self.handle_partial_data(data, errors, status_code)
        elif not errors and not data:
            response_data, status_code = self.handle_null_response(status_code)
        elif data:
            response_data, status_code = self.handle_data(data, status_code)
        else:
            response_data, status_code = self.handle_errors(errors, status_code)

        total = 0
        if data:
            total = len(data) if isinstance(data, list) else 1
        response_data['meta_data'] = {
            'success': False if errors else True,
            'total': total,
            'status_code': status_code,
        }
        if fields:
            response_data['fields'] = fields
        return Response(response_data, status=status_code)

    def handle_partial_data(self, data, errors, status_code=None):
        status_code = status_code or status.HTTP_207_MULTI_STATUS
        return {"data": data, "errors": errors}, status_code

    def handle_null_response(self, status_code=None):
        status_code = status_code or status.HTTP_200_OK
        return {"data": [], "errors": []}, status_code

    def handle_data(self, data, status_code=None):
        status_code = status_code or status.HTTP_200_OK
        return {"data": data}, status_code

    def handle_errors(self, errors, status_code=None):
        status_code = status_code or status.HTTP_500_INTERNAL_SERVER_ERROR
        if not errors:
            errors = {"message": "Internal server error"}
        return {"errors": errors}, status_code
