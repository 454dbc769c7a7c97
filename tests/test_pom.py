import pytest

from featurestage.modules.featuresets.domain import ResolutionError
from featurestage.modules.featuresets.resolution import parse_dependencies, parse_pom, read_project_pom

POM = b"""<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <modelVersion>4.0.0</modelVersion>
  <groupId>org.glassfish.main.featuresets</groupId>
  <artifactId>web</artifactId>
  <version>7.0.0</version>
  <packaging>pom</packaging>
  <properties>
    <jersey.version>3.1.0</jersey.version>
    <jersey.release>${jersey.version}</jersey.release>
  </properties>
  <dependencyManagement>
    <dependencies>
      <dependency>
        <groupId>org.example</groupId>
        <artifactId>managed</artifactId>
        <version>4.0</version>
        <scope>runtime</scope>
      </dependency>
    </dependencies>
  </dependencyManagement>
  <dependencies>
    <dependency>
      <groupId>org.glassfish.jersey</groupId>
      <artifactId>jersey-server</artifactId>
      <version>${jersey.release}</version>
    </dependency>
    <dependency>
      <groupId>${project.groupId}</groupId>
      <artifactId>docs</artifactId>
      <version>${project.version}</version>
      <type>zip</type>
      <optional>true</optional>
    </dependency>
    <dependency>
      <groupId>org.example</groupId>
      <artifactId>managed</artifactId>
    </dependency>
  </dependencies>
</project>
"""


def test_parse_dependencies_interpolates_and_applies_management():
    declarations = parse_dependencies(POM)

    assert [(d.group_id, d.artifact_id, d.version, d.type, d.scope) for d in declarations] == [
        ("org.glassfish.jersey", "jersey-server", "3.1.0", "jar", "compile"),
        ("org.glassfish.main.featuresets", "docs", "7.0.0", "zip", "compile"),
        ("org.example", "managed", "4.0", "jar", "runtime"),
    ]
    assert declarations[1].optional


def test_parse_pom_without_namespace():
    pom = parse_pom(
        b"<project><parent><groupId>org.example</groupId><artifactId>parent</artifactId>"
        b"<version>2.0</version></parent><artifactId>child</artifactId></project>"
    )

    assert (pom.group_id, pom.artifact_id, pom.version) == ("org.example", "child", "2.0")
    assert pom.parent.extension == "pom"


def test_missing_version_is_a_resolution_error():
    content = (
        b"<project><dependencies><dependency><groupId>org.example</groupId>"
        b"<artifactId>core</artifactId></dependency></dependencies></project>"
    )

    with pytest.raises(ResolutionError, match="no version"):
        parse_dependencies(content, "core.pom")


def test_malformed_pom_is_a_resolution_error():
    with pytest.raises(ResolutionError, match="Failed to parse"):
        parse_pom(b"<project>", "broken.pom")


def test_read_project_pom_build_directory(tmp_path):
    pom_path = tmp_path / "pom.xml"
    pom_path.write_bytes(
        b"<project><groupId>org.example</groupId><artifactId>app</artifactId><version>1.0</version>"
        b"<build><directory>${project.basedir}/out</directory></build></project>"
    )

    model = read_project_pom(pom_path)

    assert model.base_dir == tmp_path
    assert model.build_dir == tmp_path / "out"
    assert model.dependencies == []


def test_read_project_pom_missing_file(tmp_path):
    with pytest.raises(ResolutionError):
        read_project_pom(tmp_path / "pom.xml")
