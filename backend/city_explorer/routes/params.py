"""
City Explorer Backend — `data` Query Parameter Parsing
========================================================

What:  FastAPI dependency that turns the `data` query parameter into a
       LocationQuery.
Why:   The browser frontend sends its location object with jQuery's default
       encoding, which produces bracketed keys:

           /weather?data[id]=1&data[latitude]=47.6&data[longitude]=-122.3

       FastAPI does not parse that shape, so it is handled here. Two other
       forms are accepted for non-jQuery clients:

           /weather?data={"id":1,"latitude":47.6,"longitude":-122.3}   (JSON)
           /location?data=Seattle                                       (plain)

       A plain, non-JSON-object value is taken as the search_query.
"""

import json
from typing import Any, Dict, Optional

from fastapi import Query, Request
from pydantic import ValidationError as PydanticValidationError

from city_explorer.exceptions import ValidationError
from city_explorer.schemas.explorer import LocationQuery

_PREFIX = "data["


def _bracketed_fields(request: Request) -> Dict[str, str]:
    fields: Dict[str, str] = {}
    for key, value in request.query_params.multi_items():
        if key.startswith(_PREFIX) and key.endswith("]"):
            # jQuery sends empty strings for null fields
            if value != "":
                fields[key[len(_PREFIX):-1]] = value
    return fields


def _decode_plain(raw: str) -> Dict[str, Any]:
    try:
        decoded = json.loads(raw)
    except ValueError:
        decoded = None
    if isinstance(decoded, dict):
        return decoded
    return {"search_query": raw}


async def location_query(
    request: Request,
    data: Optional[str] = Query(
        default=None,
        description=(
            "Location reference: a search string, a JSON object, or bracketed "
            "keys such as data[id]=1&data[latitude]=47.6&data[longitude]=-122.3"
        ),
    ),
) -> LocationQuery:
    fields: Dict[str, Any] = _bracketed_fields(request)
    if not fields:
        if data is None or data.strip() == "":
            raise ValidationError(message="The 'data' query parameter is required", field="data")
        fields = _decode_plain(data)

    try:
        return LocationQuery.model_validate(fields)
    except PydanticValidationError as e:
        raise ValidationError(
            message="The 'data' query parameter is not a valid location reference",
            field="data",
            context={"errors": [err["loc"][0] for err in e.errors() if err.get("loc")]},
        )
