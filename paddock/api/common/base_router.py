from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, Depends, status

from paddock.api.common.decorators import handle_route_errors, log_route_call

# Error statuses any authenticated route can produce through handle_service_error
DEFAULT_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    status.HTTP_401_UNAUTHORIZED: {"description": "No verified identity"},
    status.HTTP_403_FORBIDDEN: {"description": "Caller may not act on this resource"},
    status.HTTP_404_NOT_FOUND: {"description": "Resource not found"},
}


class BaseRouter:
    """
    Wraps an APIRouter so every endpoint registered through it gets the
    logging and service-error translation decorators, and documents the
    error responses those decorators produce.
    """

    def __init__(
        self,
        router: APIRouter,
        default_tags: Optional[List[str]] = None,
        default_dependencies: Optional[List[Depends]] = None,
        default_responses: Optional[Dict[int, Dict[str, Any]]] = None,
    ):
        self.router = router
        self.default_tags = list(default_tags or [])
        self.default_dependencies = list(default_dependencies or [])
        self.default_responses = dict(
            DEFAULT_ERROR_RESPONSES if default_responses is None else default_responses
        )

    def add_api_route(
        self,
        path: str,
        endpoint: Callable[..., Any],
        *,
        methods: List[str],
        tags: Optional[List[str]] = None,
        dependencies: Optional[List[Depends]] = None,
        responses: Optional[Dict[int, Dict[str, Any]]] = None,
        apply_common_decorators: bool = True,
        **kwargs: Any,
    ) -> None:
        if apply_common_decorators:
            endpoint = log_route_call(handle_route_errors(endpoint))

        self.router.add_api_route(
            path,
            endpoint,
            methods=methods,
            tags=sorted(set(self.default_tags + (tags or []))),
            dependencies=self.default_dependencies + (dependencies or []),
            responses={**self.default_responses, **(responses or {})},
            **kwargs,
        )

    def route(
        self, path: str, methods: List[str], **kwargs: Any
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        def decorator(endpoint: Callable[..., Any]) -> Callable[..., Any]:
            self.add_api_route(path, endpoint, methods=methods, **kwargs)
            return endpoint

        return decorator

    def get(self, path: str, **kwargs: Any):
        return self.route(path, ["GET"], **kwargs)

    def post(self, path: str, **kwargs: Any):
        return self.route(path, ["POST"], **kwargs)

    def put(self, path: str, **kwargs: Any):
        return self.route(path, ["PUT"], **kwargs)

    def patch(self, path: str, **kwargs: Any):
        return self.route(path, ["PATCH"], **kwargs)

    def delete(self, path: str, **kwargs: Any):
        return self.route(path, ["DELETE"], **kwargs)
