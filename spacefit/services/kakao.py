# spacefit/services/kakao.py
# -----------------------------------------------------------------------------
# 카카오 로컬 API 어댑터
# - 주소 → 좌표 (주소 검색 실패 시 키워드 검색으로 fallback)
# - 18개 카테고리 POI 동시 검색
# - 오류 구분: 없음(None) / 잘못된 요청(InvalidInput) / 장애(ProviderUnavailable)
# -----------------------------------------------------------------------------
from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

import httpx
from loguru import logger

from spacefit.core.categories import POI_GROUP_KEYS, PoiCategory
from spacefit.core.config import Settings, settings as default_settings
from spacefit.core.errors import InvalidInput, ProviderUnavailable
from spacefit.core.models import Location, Poi

ADDRESS_PATH = "/v2/local/search/address.json"
KEYWORD_PATH = "/v2/local/search/keyword.json"
CATEGORY_PATH = "/v2/local/search/category.json"


def _to_float(value, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def doc_to_poi(doc: dict, category: PoiCategory) -> Poi:
    return Poi(
        name=doc.get("place_name") or "",
        category_code=category.value,
        lat=_to_float(doc.get("y")),
        lng=_to_float(doc.get("x")),
        distance_m=max(_to_float(doc.get("distance")), 0.0),
        address=doc.get("address_name") or doc.get("road_address_name") or "",
    )


class KakaoLocalClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://dapi.kakao.com",
        radius_m: int = 1000,
        max_pages: int = 1,
        timeout_s: float = 10.0,
        retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            raise ProviderUnavailable("KAKAO_API_KEY가 설정되어 있지 않습니다.")
        self.api_key = api_key
        self.base_url = base_url
        self.radius_m = radius_m
        self.max_pages = max_pages
        self.retries = retries
        self.timeout = httpx.Timeout(timeout_s, connect=6.0)
        self.limits = httpx.Limits(max_keepalive_connections=10, max_connections=20)
        self.transport = transport
        self.backoff_s = 1.5

    @classmethod
    def from_settings(cls, cfg: Settings | None = None) -> "KakaoLocalClient":
        cfg = cfg or default_settings
        return cls(
            api_key=cfg.KAKAO_API_KEY or "",
            base_url=cfg.KAKAO_BASE_URL,
            radius_m=cfg.KAKAO_SEARCH_RADIUS_M,
            max_pages=cfg.KAKAO_MAX_PAGES,
            timeout_s=cfg.KAKAO_TIMEOUT_S,
            retries=cfg.KAKAO_RETRIES,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"KakaoAK {self.api_key}"},
            timeout=self.timeout,
            limits=self.limits,
            transport=self.transport,
        )

    async def _get(self, client: httpx.AsyncClient, path: str, params: dict) -> Optional[dict]:
        """응답 JSON. 404 는 None. 타임아웃은 재시도 후 ProviderUnavailable."""
        for attempt in range(self.retries):
            try:
                r = await client.get(path, params=params)
            except (httpx.ConnectTimeout, httpx.ReadTimeout) as e:
                if attempt == self.retries - 1:
                    logger.warning(f"[Kakao] timeout {attempt+1}/{self.retries} … {e}")
                    break
                wait = self.backoff_s * (attempt + 1)
                logger.warning(
                    f"[Kakao] timeout 재시도 {attempt+1}/{self.retries} … {e}. {wait:.1f}s 대기"
                )
                await asyncio.sleep(wait)
                continue
            except httpx.HTTPError as e:
                logger.error(f"[Kakao] HTTPError: {e}")
                raise ProviderUnavailable(f"External API unavailable: {e}") from e

            if r.status_code == 200:
                try:
                    return r.json()
                except ValueError as e:
                    logger.error(f"[Kakao] JSON 파싱 실패 ({path}): {e}")
                    raise ProviderUnavailable(f"Kakao API returned invalid JSON ({path})") from e
            if r.status_code == 400:
                raise InvalidInput(f"Invalid request: {params.get('query') or path}")
            if r.status_code == 401:
                raise ProviderUnavailable("Invalid API key")
            if r.status_code == 404:
                return None
            raise ProviderUnavailable(f"Kakao API error: {r.status_code}")

        raise ProviderUnavailable(f"External API unavailable: timeout ({path})")

    async def geocode(self, address: str) -> Optional[Location]:
        if not address or not address.strip():
            raise InvalidInput("Invalid address: empty")
        query = address.strip()

        async with self._client() as client:
            # 1) 주소 검색
            data = await self._get(client, ADDRESS_PATH, {"query": query})
            docs = (data or {}).get("documents") or []
            if docs:
                doc = docs[0]
                return Location(
                    address=doc.get("address_name") or query,
                    lat=_to_float(doc.get("y")),
                    lng=_to_float(doc.get("x")),
                )

            # 2) 키워드 검색 (장소명, POI 이름 등)
            data = await self._get(client, KEYWORD_PATH, {"query": query})
            docs = (data or {}).get("documents") or []
            if not docs:
                return None
            doc = docs[0]
            return Location(
                address=doc.get("address_name")
                or doc.get("road_address_name")
                or doc.get("place_name")
                or query,
                lat=_to_float(doc.get("y")),
                lng=_to_float(doc.get("x")),
            )

    async def _search_category(
        self, client: httpx.AsyncClient, lat: float, lng: float, category: PoiCategory
    ) -> List[Poi]:
        pois: List[Poi] = []
        for page in range(1, self.max_pages + 1):
            params = {
                "category_group_code": category.value,
                "x": str(lng),
                "y": str(lat),
                "radius": str(self.radius_m),
                "page": str(page),
            }
            data = await self._get(client, CATEGORY_PATH, params)
            docs = (data or {}).get("documents") or []
            if not docs:
                break
            pois.extend(doc_to_poi(d, category) for d in docs)
            # meta.is_end가 True면 종료
            meta = (data or {}).get("meta") or {}
            if meta.get("is_end"):
                break
        return pois

    async def search_poi(self, lat: float, lng: float, category: PoiCategory) -> List[Poi]:
        async with self._client() as client:
            return await self._search_category(client, lat, lng, category)

    async def search_all_categories(self, lat: float, lng: float) -> Dict[str, List[Poi]]:
        categories = list(POI_GROUP_KEYS)
        async with self._client() as client:
            tasks = [
                asyncio.ensure_future(self._search_category(client, lat, lng, c))
                for c in categories
            ]
            try:
                results = await asyncio.gather(*tasks)
            finally:
                # 하나라도 실패하면 나머지 검색은 클라이언트가 닫히기 전에 정리
                for t in tasks:
                    if not t.done():
                        t.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
        return {POI_GROUP_KEYS[c]: pois for c, pois in zip(categories, results)}
