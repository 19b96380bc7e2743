import logging
from django.conf import settings
from django.db.models import ForeignKey, ManyToManyField
from rest_framework.views import APIView

from configurations.base_features.exceptions.base_exceptions import LocalBaseException
from configurations.base_features.helpers.text_helpers import snake_to_title
from configurations.base_features.views.base_exception_handler import BaseExceptionHandlerMixin
from configurations.base_features.views.base_response import ResponseFormatterMixin
from factory_users.auth_jwt import FactoryJWTAuthentication
from factory_users.permissions import HasFactoryRole, IsFactoryAuthenticated

logger = logging.getLogger(__name__)


class BaseAPIView(BaseExceptionHandlerMixin, APIView, ResponseFormatterMixin):
    """
        an abstract class for all api views

        by default it accepts all http methods, could be modified by adding
        http_method_names to your class. Only authenticated factory users can
        access it; `allowed_roles` narrows that down further (['*'] means any role).

        it's not recommended to override get, post, put or delete, as they act like
        a middleware to handle exceptions, but you can override list, retrieve,
        create, update and destroy as needed safely.

        model_class and serializer_class are required to be set in your class
    """
    model_class = None
    serializer_class = None
    http_method_names = ["get", "post", "put", "patch", "delete", "head", "options"]
    permission_classes = [IsFactoryAuthenticated, HasFactoryRole]
    authentication_classes = [FactoryJWTAuthentication]
    allowed_roles = ['*']

    def get_request_user(self, request):
        """Get the request user, if not authenticated raise LocalBaseException"""
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            raise LocalBaseException("not_authenticated", status_code=401)
        return user

    def authorize_user(self, request):
        """Roles are checked by HasFactoryRole, this only guarantees a signed-in user"""
        return self.get_request_user(request)

    def get_serializer_context(self):
        return {"request": getattr(self, "request", None), "view": self}

    def get_field_properities(self, data=None):
        """Get the field descriptors used by the dashboard tables, id first"""
        fields = []
        model_fields = [field.name for field in self.model_class._meta.get_fields()]
        keys = data.keys() if data else model_fields
        for field in keys:
            type_ = self.model_class._meta.get_field(
                field).get_internal_type() if field in model_fields else "ForeignKey"
            fields.append({"slug": field, "name": snake_to_title(field), "type": type_})
        fields.sort(key=lambda f: (f["slug"] != "id", f["type"] in ["DateTimeField", "TextField", "BooleanField"]))
        return fields

    def modify_params(self, old_params):
        params = {}
        for field in old_params.keys():
            base_field = field.split('__')[0]
            field_type = self.model_class._meta.get_field(base_field).get_internal_type()
            if field_type == 'ForeignKey':
                params[f"{base_field}__id"] = old_params[field]
            else:
                params[field] = old_params[field]
        return params

    def get_queryset(self, params=None, ordering=None):
        """Get the queryset based on the given params"""
        params = self.modify_params(params or {})
        q_params = params.pop("Q", [])
        instances = self.model_class.objects.filter(*q_params, **params)
        return instances.order_by(ordering or "-created_at")

    def get_instance(self, pk=None, params=None):
        """Get the instance based on the given params"""
        if params is None:
            params = {}
        if pk:
            params["id"] = pk
        return self.model_class.objects.get_object_or_404(raise_exception=True, **params)

    def get_serialized_objects(self, instance, many=False):
        """Get the serialized objects based on the given instance"""
        serializer = self.serializer_class(instance, many=many, context=self.get_serializer_context())
        return serializer.data

    def get_request_params(self, request):
        """
        Converts query params into Django filter kwargs,
        skipping FK and M2M fields from being wrapped in `__icontains`.
        Unknown keys are ignored.
        """
        model_fields = {f.name: f for f in self.model_class._meta.get_fields()}

        params = {}
        for key, value in request.query_params.items():
            if key in ['ordering', 'lang']:
                params[key] = value
                continue
            field = model_fields.get(key.split("__")[0])
            if field is None:
                continue
            if isinstance(field, (ForeignKey, ManyToManyField)) or "__" in key:
                params[key] = value
            else:
                params[f"{key}__icontains"] = value
        return params

    def get(self, request, pk=None, params=None, *args, **kwargs):
        """
            :params: pk - primary key of the object, if provided call retrieve() else call list()
            :params: params - filters, taken from the query string when not given
        """
        try:
            self.authorize_user(request)
            if params is None:
                params = self.get_request_params(request)
            if settings.DEBUG:
                logger.debug("[%s] GET pk: %s", self.__class__.__name__, pk)
            if pk:
                return self.retrieve(pk, params, *args, **kwargs)
            return self.list(params, *args, **kwargs)
        except Exception as e:
            return self.handle_exception(e)

    def retrieve(self, pk, params, *args, **kwargs):
        """Get single serialized object"""
        params.pop('lang', None)
        params.pop('ordering', None)
        if pk == "0":
            return self.format_response(data=[], status_code=200, fields=self.get_field_properities())
        instance_object = self.get_instance(pk, params)
        serialized_data = self.get_serialized_objects(instance_object)
        fields = self.get_field_properities(serialized_data)
        return self.format_response(data=serialized_data, status_code=200, fields=fields)

    def list(self, params, *args, **kwargs):
        """Get list of serialized objects"""
        ordering_by = params.pop('ordering', None)
        params.pop('lang', None)
        instance_objects = self.get_queryset(params=params, ordering=ordering_by)
        serialized_data = self.get_serialized_objects(instance_objects, many=True)
        return self.format_response(data=serialized_data, status_code=200)

    def handle_post_params(self, request, params):
        params['user'] = request.user
        params['lang'] = 'en'
        return params

    def post(self, request, *args, **kwargs):
        """calls create method, override create() as needed"""
        try:
            self.authorize_user(request)
            data = request.data.copy()
            params = self.handle_post_params(request, {})
            return self.create(data, params, *args, **kwargs)
        except Exception as e:
            return self.handle_exception(e)

    def create(self, data, params, *args, **kwargs):
        """Create new object"""
        serializer = self.serializer_class(data=data, context=self.get_serializer_context())
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return self.format_response(data=serializer.data, status_code=201)

    def put(self, request, pk, partial=False, *args, **kwargs):
        """
            :param pk : Primary key of the object to be updated
            :param partial: Whether to update all fields or only the fields provided in the request
        """
        try:
            self.authorize_user(request)
            data = request.data.copy()
            params = self.handle_post_params(request, {})
            return self.update(data, params, pk, partial, *args, **kwargs)
        except Exception as e:
            return self.handle_exception(e)

    def update(self, data, params, pk, partial, *args, **kwargs):
        """Update an object"""
        instance = self.get_instance(pk)
        serializer = self.serializer_class(
            instance, data=data, partial=partial, context=self.get_serializer_context())
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return self.format_response(data=serializer.data, status_code=200)

    def patch(self, request, pk, *args, **kwargs):
        """calls put with partial=True"""
        return self.put(request, pk, partial=True, *args, **kwargs)

    def delete(self, request, pk, *args, **kwargs):
        """calls destroy method, override destroy as needed"""
        try:
            self.authorize_user(request)
            return self.destroy(request, pk, *args, **kwargs)
        except Exception as e:
            return self.handle_exception(e)

    def destroy(self, request, pk, *args, **kwargs):
        """Delete an object"""
        instance = self.get_instance(pk)
        instance.delete()
        return self.format_response(data={}, status_code=204)
