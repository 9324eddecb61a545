"""
Output document shapes for typed records.

The flat shape is the record itself. The metricset shape mirrors the
document layout of the metricbeat haproxy module; its field mapping is
fixed and spelled out in full below.
"""

from collections.abc import Callable
from typing import Any

from haproxyStats.errors import SchemaMismatchError
from haproxyStats.records import TypedRecord

Document = dict[str, Any]
Shaper = Callable[[TypedRecord], Document]

METRICSET_MODULE = "haproxy"
METRICSET_NAME = "stat"
METRICSET_RTT = 115
COMPONENT_TYPE = 0


def shape_flat(record: TypedRecord) -> Document:
    """Flat document: metadata and every column at the top level."""
    return record.to_dict()


def shape_metricset(record: TypedRecord) -> Document:
    """
    Nested metricbeat-style document for one record.

    Args:
        record: Typed record of one statistics row

    Returns:
        Metricset document

    Raises:
        SchemaMismatchError: If a mapped column is missing from the record
    """
    missing: list[str] = []

    def field(name: str) -> Any:
        if name not in record:
            missing.append(name)
            return None
        return record.get(name)

    timestamp = record.metadata.timestamp
    host = record.metadata.host

    document: Document = {
        "@timestamp": timestamp,
        "beat": {
            "hostname": host,
            "host": host,
        },
        "haproxy": {
            "stat": {
                "check": {
                    "agent": {"last": record.get("last_agt") or 0},
                    "health": {"last": record.get("last_chk") or 0},
                    "status": field("check_status"),
                },
                "component_type": COMPONENT_TYPE,
                "compressor": {
                    "bypassed": {"bytes": field("comp_byp")},
                    "in": {"bytes": field("comp_in")},
                    "response": {"bytes": field("comp_rsp")},
                },
                "connection": {"total": field("stot")},
                "in": {"bytes": field("bin")},
                "out": {"bytes": field("bout")},
                "process_id": field("pid"),
                "proxy": {
                    "id": field("iid"),
                    "name": field("pxname"),
                },
                "queue": {},
                "request": {
                    "denied": field("dreq"),
                    "errors": field("ereq"),
                    "total": field("req_tot"),
                    "rate": {
                        "max": field("req_rate_max"),
                        "value": field("req_rate"),
                    },
                },
                "response": {
                    "denied": field("dresp"),
                    "http": {
                        "1xx": field("hrsp_1xx"),
                        "2xx": field("hrsp_2xx"),
                        "3xx": field("hrsp_3xx"),
                        "4xx": field("hrsp_4xx"),
                        "5xx": field("hrsp_5xx"),
                        "other": field("hrsp_other"),
                    },
                },
                "server": {"id": field("sid")},
                "service_name": field("svname"),
                "session": {
                    "current": field("scur"),
                    "limit": field("slim"),
                    "max": field("smax"),
                    "rate": {
                        "limit": field("rate_lim"),
                        "max": field("rate_max"),
                        "value": field("rate"),
                    },
                },
                "status": field("status"),
            }
        },
        "metricset": {
            "host": host,
            "module": METRICSET_MODULE,
            "name": METRICSET_NAME,
            "rtt": METRICSET_RTT,
        },
    }

    if missing:
        raise SchemaMismatchError(
            f"Record is missing columns required by the metricset shape: {', '.join(missing)}",
            fields=missing
        )

    return document
