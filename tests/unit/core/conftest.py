"""Shared fixtures for core unit tests"""

import pytest


SAMPLE_POST = """\
---
title: "Request/Response with Spring AMQP"
categories: ["Spring Boot"]
date: 2021-03-01 05:00:00 +1100
modified: 2021-03-05
author: pratikdas
excerpt: "Messaging between services with RabbitMQ."
image:
  auto: 0074-stack
---

Messaging is a common way to decouple services. In this article we look at
request/response over AMQP.

## Sending a Request

```java
public class Client {
}
```

```yaml
spring:
  rabbitmq:
    host: localhost
```
"""


@pytest.fixture(name="post_dir")
def post_dir_fixture(tmp_path):
    """A _posts directory holding the sample post under its conventional file name."""
    d = tmp_path / "_posts"
    d.mkdir()
    (d / "2021-03-01-spring-amqp.md").write_text(SAMPLE_POST)
    return d


@pytest.fixture(name="sample_path")
def sample_path_fixture(post_dir):
    return post_dir / "2021-03-01-spring-amqp.md"


@pytest.fixture
def write_post(tmp_path):
    """Write a post under tmp_path/_posts and return its path."""
    def _write(name: str, text: str):
        d = tmp_path / "_posts"
        d.mkdir(exist_ok=True)
        p = d / name
        p.write_text(text)
        return p
    return _write
