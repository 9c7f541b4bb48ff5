from typing import Any, List, Optional

from rest_framework import serializers, views
from rest_framework.generics import GenericAPIView
from rest_framework.schemas.generators import BaseSchemaGenerator  # type: ignore
from rest_framework.schemas.generators import EndpointEnumerator as BaseEndpointEnumerator

from drf_polymorphism.drainage import add_trace_message, error
from drf_polymorphism.plumbing import get_class


class EndpointEnumerator(BaseEndpointEnumerator):
    def get_allowed_methods(self, callback):
        methods = super().get_allowed_methods(callback)
        return [
            method for method in methods
            if method not in ('OPTIONS', 'HEAD', 'TRACE', 'CONNECT')
        ]


class ResponseTypeCollector(BaseSchemaGenerator):
    """
    Collects the distinct response types of all API endpoints of a URL conf. These
    are the candidate base types handed to the rewriter.
    """
    endpoint_inspector_cls = EndpointEnumerator

    def get_response_types(self) -> List[Any]:
        self._initialise_endpoints()
        response_types = {}

        for path, method, callback in self.endpoints:
            view = self.create_view(callback, method)
            with add_trace_message(view.__class__):
                response_type = self.get_response_type(view)
            if response_type is not None:
                response_types[response_type] = None

        return list(response_types)

    def get_response_type(self, view) -> Optional[type]:
        try:
            if isinstance(view, GenericAPIView):
                serializer_class = view.get_serializer_class()
            elif isinstance(view, views.APIView):
                # APIView does not implement the required interface, but be lenient and make
                # good guesses before giving up and emitting an error.
                if callable(getattr(view, 'get_serializer_class', None)):
                    serializer_class = view.get_serializer_class()
                elif hasattr(view, 'serializer_class'):
                    serializer_class = view.serializer_class
                else:
                    error(
                        'unable to guess serializer. Consider using GenericAPIView as view base '
                        'class or add a serializer_class. Ignoring view for now.'
                    )
                    return None
            else:
                error('Encountered unknown view base class. Ignoring for now.')
                return None
        except Exception as exc:
            error(
                f'exception raised while getting serializer. Hint: Is get_serializer_class() '
                f'returning None? Ignoring the view for now. (Exception: {exc})'
            )
            return None

        if serializer_class is None:
            return None
        if issubclass(get_class(serializer_class), serializers.ListSerializer):
            # list serializer classes may declare their child as class attribute
            child = getattr(serializer_class, 'child', None)
            if child is None:
                error('unable to determine the child of list serializer. Ignoring view for now.')
                return None
            return get_class(child)
        return get_class(serializer_class)
