"""
Shared fixtures for haproxyStats tests: a realistic HAProxy 'show stat' export.
"""

import os
from pathlib import Path

import pytest

# Column layout of an HAProxy 1.7 CSV statistics export
STAT_HEADER = [
    "pxname", "svname", "qcur", "qmax", "scur", "smax", "slim", "stot", "bin", "bout",
    "dreq", "dresp", "ereq", "econ", "eresp", "wretr", "wredis", "status", "weight",
    "act", "bck", "chkfail", "chkdown", "lastchg", "downtime", "qlimit", "pid", "iid",
    "sid", "throttle", "lbtot", "tracked", "type", "rate", "rate_lim", "rate_max",
    "check_status", "check_code", "check_duration", "hrsp_1xx", "hrsp_2xx", "hrsp_3xx",
    "hrsp_4xx", "hrsp_5xx", "hrsp_other", "hanafail", "req_rate", "req_rate_max",
    "req_tot", "cli_abrt", "srv_abrt", "comp_in", "comp_out", "comp_byp", "comp_rsp",
    "lastsess", "last_chk", "last_agt", "qtime", "ctime", "rtime", "ttime",
]

FRONTEND_ROW = {
    "pxname": "http-in", "svname": "FRONTEND", "scur": "3", "smax": "10", "slim": "2000",
    "stot": "120", "bin": "34000", "bout": "56000", "dreq": "0", "dresp": "0", "ereq": "1",
    "status": "OPEN", "pid": "1", "iid": "2", "sid": "0", "type": "0", "rate": "1",
    "rate_lim": "0", "rate_max": "5", "hrsp_1xx": "0", "hrsp_2xx": "110", "hrsp_3xx": "2",
    "hrsp_4xx": "8", "hrsp_5xx": "0", "hrsp_other": "0", "req_rate": "1",
    "req_rate_max": "5", "req_tot": "120", "comp_in": "0", "comp_out": "0",
    "comp_byp": "0", "comp_rsp": "0",
}

SERVER_ROW = {
    "pxname": "app", "svname": "web1", "qcur": "0", "qmax": "0", "scur": "1", "smax": "4",
    "stot": "80", "bin": "21000", "bout": "43000", "dresp": "0", "econ": "0", "eresp": "0",
    "wretr": "0", "wredis": "0", "status": "UP", "weight": "1", "act": "1", "bck": "0",
    "chkfail": "0", "chkdown": "0", "lastchg": "3600", "downtime": "0", "pid": "1",
    "iid": "3", "sid": "1", "lbtot": "80", "type": "2", "rate": "1", "rate_max": "3",
    "check_status": "L4OK", "check_code": "", "check_duration": "0", "hrsp_1xx": "0",
    "hrsp_2xx": "75", "hrsp_3xx": "1", "hrsp_4xx": "4", "hrsp_5xx": "0",
    "hrsp_other": "0", "cli_abrt": "0", "srv_abrt": "0", "lastsess": "2",
    "last_chk": "Layer4 check passed", "qtime": "0", "ctime": "1", "rtime": "12",
    "ttime": "40",
}

# 2024-03-01T00:00:00Z
CAPTURE_EPOCH = 1709251200


def header_line(header=STAT_HEADER) -> str:
    return "# " + ",".join(header) + ","


def row_line(values: dict, header=STAT_HEADER) -> str:
    return ",".join(values.get(name, "") for name in header) + ","


def stats_text(*rows: dict, blank_lines: int = 0, header=STAT_HEADER) -> str:
    lines = [header_line(header)]
    lines.extend(row_line(row, header) for row in rows)
    lines.extend("" for _ in range(blank_lines))
    return "\n".join(lines) + "\n"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep HAPROXY_STATS_* variables of the host out of the tests."""
    for key in list(os.environ):
        if key.startswith("HAPROXY_STATS_"):
            monkeypatch.delenv(key)


@pytest.fixture
def stats_file(tmp_path):
    """Factory writing an export under tmp_path with a metadata-bearing name."""
    def _write(*rows: dict, blank_lines: int = 0, name: str = f"{CAPTURE_EPOCH}.lb01.stats.csv",
               header=STAT_HEADER) -> Path:
        path = tmp_path / name
        path.write_text(stats_text(*rows, blank_lines=blank_lines, header=header), encoding="utf-8")
        return path
    return _write
