"""Text of the write-once extension files.

Each scaffold is the smallest valid file for its role; after creation the user
owns it and it is never regenerated.
"""

from __future__ import annotations

from regen_publisher.framework.paths import lower_camel

MAPPER_DOCTYPE = (
    '<!DOCTYPE mapper PUBLIC "-//mybatis.org//DTD Mapper 3.0//EN" '
    '"http://mybatis.org/dtd/mybatis-3-mapper.dtd" >'
)


def model_extension(*, package: str, model_name: str, base_name: str, base_qualified: str) -> str:
    lines = [f"package {package};", ""]
    if base_qualified != f"{package}.{base_name}":
        lines.extend([f"import {base_qualified};", ""])
    lines.extend(
        [
            f"public class {model_name} extends {base_name} {{",
            "}",
            "",
        ]
    )
    return "\n".join(lines)


def mapper_extension(
    *,
    package: str,
    mapper_name: str,
    base_name: str,
    base_qualified: str,
    model_name: str,
) -> str:
    lines = [f"package {package};", ""]
    if base_qualified != f"{package}.{base_name}":
        lines.append(f"import {base_qualified};")
    lines.extend(
        [
            "import org.springframework.stereotype.Repository;",
            "",
            f'@Repository("{lower_camel(model_name)}Mapper")',
            f"public interface {mapper_name} extends {base_name} {{",
            "}",
            "",
        ]
    )
    return "\n".join(lines)


def service_facade(*, package: str, model_name: str, mapper_name: str, mapper_qualified: str) -> str:
    bean = lower_camel(model_name)
    return "\n".join(
        [
            f"package {package};",
            "",
            f"import {mapper_qualified};",
            "import org.springframework.beans.factory.annotation.Autowired;",
            "import org.springframework.stereotype.Service;",
            "",
            f'@Service("{bean}Service")',
            f"public class {model_name}Service {{",
            "    @Autowired",
            f"    private {mapper_name} {bean}Mapper;",
            "}",
            "",
        ]
    )


def descriptor_root(*, namespace: str, encoding: str) -> str:
    return "\n".join(
        [
            f'<?xml version="1.0" encoding="{encoding}" ?>',
            MAPPER_DOCTYPE,
            f'<mapper namespace="{namespace}" >',
            "",
            "</mapper>",
            "",
        ]
    )
