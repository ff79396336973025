import asyncio
import json

from fastapi import HTTPException

from medcare.exceptions import http_exception_handler


def _body(response):
    return json.loads(response.body)


def test_http_exception_keeps_its_status():
    res = asyncio.run(http_exception_handler(None, HTTPException(status_code=403, detail="Not authenticated")))
    assert res.status_code == 403
    assert _body(res) == {"success": False, "message": "Not authenticated"}


def test_framework_404_becomes_route_not_found():
    res = asyncio.run(http_exception_handler(None, HTTPException(status_code=404, detail="Not Found")))
    assert res.status_code == 404
    assert _body(res)["message"] == "Route not found"
