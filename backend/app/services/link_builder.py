"""
Library API — Hypermedia Link Builder
=======================================

What:  Builds the `links` set for a single resource or a paged collection
       from the current query state.
How:   Route templates ("/api/authors/{id}/books") are expanded with the
       resource id and action parameters. Parameters a template does not
       declare are appended as query parameters. Query strings are built
       with Starlette's URL type so encoding matches the rest of the stack.
Who:   Author and book route handlers; one builder per request, since the
       base URL comes from the incoming request.

Link order is deterministic:
    item:        self, then actions in the order given
    collection:  self, nextPage (if has_next), previousPage (if has_previous),
                 then actions in the order given

Paging flags come from PagedList; the builder never recomputes paging.
"""

from dataclasses import dataclass, field
from string import Formatter
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from starlette.datastructures import URL

from app.schemas.common import Link


@dataclass(frozen=True)
class ResourceAction:
    """
    A related action advertised next to a resource.

    Attributes:
        rel:      Link relation, e.g. "delete_author".
        template: Route template; `{id}` receives the resource id.
        method:   HTTP method for the action.
        params:   Values for other placeholders; leftovers become query params.
    """

    rel: str
    template: str
    method: str = "GET"
    params: Mapping[str, Any] = field(default_factory=dict)


def _placeholders(template: str) -> List[str]:
    return [name for _, name, _, _ in Formatter().parse(template) if name]


def _clean_query(values: Mapping[str, Any]) -> Dict[str, str]:
    return {key: str(value) for key, value in values.items() if value is not None}


class LinkBuilder:
    """
    Args:
        base_url:            Scheme and host of the API, e.g. request.base_url.
        item_template:       Template of a single resource, with `{id}`.
        collection_template: Template of the resource collection.
        page_param:          Query parameter carrying the page number.
        path_params:         Placeholder values shared by every template,
                             e.g. {"author_id": ...} for nested resources.
    """

    def __init__(
        self,
        base_url: str,
        item_template: str,
        collection_template: str,
        page_param: str = "pageNumber",
        path_params: Optional[Mapping[str, Any]] = None,
    ):
        self.base_url = str(base_url).rstrip("/")
        self.item_template = item_template
        self.collection_template = collection_template
        self.page_param = page_param
        self.path_params = dict(path_params or {})

    # ── Single resource ───────────────────────────────────────────────────

    def links_for_item(
        self,
        resource_id: Any,
        fields: Optional[str] = None,
        actions: Sequence[ResourceAction] = (),
    ) -> List[Link]:
        """
        `self` plus one link per action.

        The `self` link carries `fields` only when it is non-blank, so the
        canonical address is the same for "no shaping" and "all fields".
        """
        query = {"fields": fields.strip()} if fields and fields.strip() else {}
        links = [Link(href=self._href(self.item_template, {"id": resource_id}, query), rel="self", method="GET")]
        for action in actions:
            values = {"id": resource_id, **action.params}
            links.append(Link(href=self._href(action.template, values), rel=action.rel, method=action.method))
        return links

    # ── Collection ────────────────────────────────────────────────────────

    def links_for_collection(
        self,
        query_state: Mapping[str, Any],
        has_next: bool,
        has_previous: bool,
        actions: Sequence[ResourceAction] = (),
    ) -> List[Link]:
        """Navigation links for a page, followed by collection actions."""
        links = [Link(href=self.page_href(query_state), rel="self", method="GET")]
        if has_next:
            links.append(Link(href=self.page_href(query_state, 1), rel="nextPage", method="GET"))
        if has_previous:
            links.append(Link(href=self.page_href(query_state, -1), rel="previousPage", method="GET"))
        for action in actions:
            links.append(Link(href=self._href(action.template, action.params), rel=action.rel, method=action.method))
        return links

    def page_href(self, query_state: Mapping[str, Any], offset: int = 0) -> str:
        """Collection address for the current page moved by `offset` pages."""
        query = dict(query_state)
        if offset:
            query[self.page_param] = int(query.get(self.page_param) or 1) + offset
        return self._href(self.collection_template, {}, query)

    # ── Helpers ───────────────────────────────────────────────────────────

    def _href(
        self,
        template: str,
        values: Mapping[str, Any],
        query: Optional[Mapping[str, Any]] = None,
    ) -> str:
        path, leftover = self._expand(template, {**self.path_params, **values})
        leftover = {key: value for key, value in leftover.items() if key not in self.path_params}
        params = _clean_query({**leftover, **(query or {})})
        url = URL(self.base_url + path)
        if params:
            url = url.include_query_params(**params)
        return str(url)

    @staticmethod
    def _expand(template: str, values: Mapping[str, Any]) -> Tuple[str, Dict[str, Any]]:
        names = _placeholders(template)
        missing = [name for name in names if values.get(name) is None]
        if missing:
            raise KeyError(f"Template '{template}' needs values for {missing}")
        path = template.format(**{name: str(values[name]) for name in names})
        # `id` is only meaningful as a path segment, never as a query param
        leftover = {key: value for key, value in values.items() if key not in names and key != "id"}
        return path, leftover
