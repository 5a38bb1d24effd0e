"""Package-prefix table and baseline dependencies used by the resolver."""

from __future__ import annotations

from jar_rebuilder.models.dependency import Coordinate

# (package prefix, groupId, artifactId, version), ordered.
# The longest matching prefix wins; on equal length the earlier row wins.
KNOWN_PACKAGES: list[tuple[str, str, str, str]] = [
    ("org.springframework", "org.springframework", "spring-core", "5.3.9"),
    ("javax.servlet", "javax.servlet", "javax.servlet-api", "4.0.1"),
    ("org.hibernate", "org.hibernate", "hibernate-core", "5.5.7.Final"),
    ("com.fasterxml.jackson", "com.fasterxml.jackson.core", "jackson-core", "2.13.0"),
    ("com.fasterxml.jackson.databind", "com.fasterxml.jackson.core", "jackson-databind", "2.13.0"),
    ("com.fasterxml.jackson.annotation", "com.fasterxml.jackson.core", "jackson-annotations", "2.13.0"),
    ("org.apache.commons", "org.apache.commons", "commons-lang3", "3.12.0"),
    ("org.apache.commons.io", "commons-io", "commons-io", "2.11.0"),
    ("org.apache.commons.codec", "commons-codec", "commons-codec", "1.15"),
    ("org.apache.commons.collections4", "org.apache.commons", "commons-collections4", "4.4"),
    ("org.slf4j", "org.slf4j", "slf4j-api", "1.7.32"),
    ("ch.qos.logback", "ch.qos.logback", "logback-classic", "1.2.6"),
    ("org.apache.logging.log4j", "org.apache.logging.log4j", "log4j-api", "2.17.1"),
    ("com.google.common", "com.google.guava", "guava", "31.0.1-jre"),
    ("com.google.gson", "com.google.code.gson", "gson", "2.8.9"),
    ("lombok", "org.projectlombok", "lombok", "1.18.22"),
    ("org.apache.http", "org.apache.httpcomponents", "httpclient", "4.5.13"),
    ("okhttp3", "com.squareup.okhttp3", "okhttp", "4.9.3"),
    ("org.yaml.snakeyaml", "org.yaml", "snakeyaml", "1.29"),
    ("javax.persistence", "javax.persistence", "javax.persistence-api", "2.2"),
    ("javax.validation", "javax.validation", "validation-api", "2.0.1.Final"),
    ("org.mybatis", "org.mybatis", "mybatis", "3.5.9"),
    ("redis.clients.jedis", "redis.clients", "jedis", "3.7.0"),
    ("io.netty", "io.netty", "netty-all", "4.1.72.Final"),
    ("org.junit.jupiter", "org.junit.jupiter", "junit-jupiter-api", "5.8.2"),
    ("org.junit", "junit", "junit", "4.13.2"),
    ("org.mockito", "org.mockito", "mockito-core", "3.12.4"),
]

# Appended as safe defaults whenever the archive carries no embedded pom.
BASELINE: list[Coordinate] = [
    Coordinate("org.slf4j", "slf4j-api", "1.7.32", "compile", source="baseline"),
    Coordinate("junit", "junit", "4.13.2", "test", source="baseline"),
    Coordinate("org.mockito", "mockito-core", "3.12.4", "test", source="baseline"),
]
