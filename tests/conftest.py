import os
from typing import Any

import pytest

# Monkeypatch coverage to bypass teardown crash in act/docker
if os.getenv("COVERAGE_PROCESS_START"):
    import coverage

    coverage.process_startup()

    # Nukes the teardown assertion that fails in act
    import coverage.collector

    def safe_stop(self: Any) -> None:
        if self in getattr(self, "_collectors", []):
            self._collectors.remove(self)

    coverage.collector.Collector.stop = safe_stop


MAP_HCL = """\
simple_map {
  foo   = "bar"
  bar   = "baz"
  index = 1
}

simple_map {
  foo   = "bar"
  bar   = "baz"
  index = 0
}

resource "security/group" "foobar" {
  name = "foobar"

  allow {
    name  = "localhost"
    cidrs = ["127.0.0.1/32"]
  }

  allow {
    name  = "lan"
    cidrs = ["192.168.0.0/16"]
  }

  deny {
    name  = "internet"
    cidrs = ["0.0.0.0/0"]
  }
}

resource "security/group" "second" {
  name = "second"

  allow {
    name  = "all"
    cidrs = ["0.0.0.0/0"]
  }
}

resource "instance" "an_instance" {
  name  = "an_instance"
  image = "ubuntu:18.04"

  user "test" {
    root = true
  }
}
"""

SECURITY_GROUP_HCL = (
    'resource "security/group" foobar { name = "foobar"\n'
    ' allow { name = "localhost"\n cidrs = ["127.0.0.1/32"] }\n'
    ' allow { name = "lan"\n cidrs = ["192.168.0.0/16"] } }'
)

SCALAR_HCL = """\
# Scalars of every kind
test_unsigned_int = 123
test_signed_int   = -123
test_float        = -1.23
test_bool         = true
test_null         = null
test_string       = "foo bar" // trailing comment
test_heredoc      = <<EOF
new
line
EOF
/* inline */ test_escaped = "\\"quoted\\"\\t\\u00e9"
"""


@pytest.fixture  # type: ignore[misc]
def map_hcl() -> str:
    return MAP_HCL


@pytest.fixture  # type: ignore[misc]
def security_group_hcl() -> str:
    return SECURITY_GROUP_HCL


@pytest.fixture  # type: ignore[misc]
def scalar_hcl() -> str:
    return SCALAR_HCL
