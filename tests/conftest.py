import logging

import pytest

from regen_publisher.foundation.logging_utils import ROOT_LOGGER_NAME
from regen_publisher.framework.artifacts import GeneratedDescriptorArtifact, GeneratedSourceArtifact

JAVA_PROJECT = "src/main/java"
RESOURCES_PROJECT = "src/main/resources"

ORDER_JAVA = """package com.acme.gen.model;

public class Order {
    private Long id;

    public Order() {
    }

    public Long getId() {
        return id;
    }
}
"""

ORDER_MAPPER_JAVA = """package com.acme.gen.dao;

import com.acme.gen.model.Order;
import com.acme.gen.model.OrderExample;
import java.util.List;

public interface OrderMapper {
    int insert(Order record);

    List<Order> selectByExample(OrderExample example);
}
"""

ORDER_EXAMPLE_JAVA = """package com.acme.gen.model;

public class OrderExample {
    protected String orderByClause;
}
"""

ORDER_MAPPER_XML = """<?xml version="1.0" encoding="UTF-8" ?>
<!DOCTYPE mapper PUBLIC "-//mybatis.org//DTD Mapper 3.0//EN" "http://mybatis.org/dtd/mybatis-3-mapper.dtd" >
<mapper namespace="com.acme.gen.dao.OrderMapper" >
  <resultMap id="BaseResultMap" type="com.acme.gen.model.Order" >
    <id column="id" property="id" jdbcType="BIGINT" />
  </resultMap>
  <select id="selectByExample" resultMap="BaseResultMap" parameterType="com.acme.gen.model.OrderExample" >
    select id from orders
  </select>
</mapper>
"""


def order_model():
    return GeneratedSourceArtifact(JAVA_PROJECT, "com.acme.gen.model", "Order.java", ORDER_JAVA, "UTF-8")


def order_mapper():
    return GeneratedSourceArtifact(
        JAVA_PROJECT, "com.acme.gen.dao", "OrderMapper.java", ORDER_MAPPER_JAVA, "UTF-8"
    )


def order_example():
    return GeneratedSourceArtifact(
        JAVA_PROJECT, "com.acme.gen.model", "OrderExample.java", ORDER_EXAMPLE_JAVA, "UTF-8"
    )


def order_descriptor():
    return GeneratedDescriptorArtifact(
        RESOURCES_PROJECT, "com/acme/gen/dao", "OrderMapper.xml", ORDER_MAPPER_XML
    )


@pytest.fixture
def order_batch():
    return [order_model(), order_mapper(), order_descriptor(), order_example()]


@pytest.fixture
def output_root(tmp_path):
    root = tmp_path / "out"
    (root / JAVA_PROJECT).mkdir(parents=True)
    (root / RESOURCES_PROJECT).mkdir(parents=True)
    return root


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
