from typing import List

import pytest

from store_check.models import MerchantRecord
from store_check.registry import StoreRegistry


@pytest.fixture
def stores() -> List[MerchantRecord]:
    return [
        MerchantRecord(id="1", name="스타벅스", category="카페", address="경기도 성남시 분당구 정자동 123"),
        MerchantRecord(id="2", name="새마을식당", category="음식점", address="경기도 성남시 분당구 산성대로 10"),
        MerchantRecord(id="3", name="이디야커피", category="카페", address="경기도 성남시 수정구 신흥동 45"),
        MerchantRecord(id="4", name="김밥천국", category="분식", address="경기도 성남시 중원구 성남동 77"),
    ]


@pytest.fixture
def registry(stores) -> StoreRegistry:
    return StoreRegistry(stores)
