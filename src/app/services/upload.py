"""
Upload Service: N개 파일 동시 업로드 (fan-out / fan-in).

동작:
1. 배치 검증 (실패 시 provider 호출 없이 실패 결과)
2. 파일마다 store 1회, 전부 동시에 시작
3. 전부 끝날 때까지 대기 (barrier)
4. 하나라도 실패 → 요청 전체 실패 (제출 순서상 첫 번째 실패의 메시지)
5. 전부 성공 → 제출 순서대로 AssetDescriptor 반환

부분 실패 정책:
- rollback_on_failure=True (기본): 같은 배치에서 이미 성공한 업로드를 삭제
  (best effort, 삭제 실패는 로그만)
- rollback_on_failure=False: 성공분을 provider에 그대로 둠

한계:
- provider timeout은 기다림만 끊는다. 이미 보낸 업로드가 timeout 뒤에 끝나면
  그 이미지는 롤백되지 않고 남을 수 있다 (provider가 경고 로그를 남김)
"""

import asyncio
import logging
from collections.abc import Sequence

from src.app.providers.base import ImageHostProvider, ProviderError
from src.app.services.validate import UploadValidator
from src.core.logging import upload_log_context
from src.domain.errors import ErrorCodes, UploadRejectError
from src.domain.messages import reject_message, store_failed_message
from src.domain.schemas import AssetDescriptor, UploadCandidate, UploadResult

logger = logging.getLogger(__name__)


class UploadService:
    """
    업로드 오케스트레이터.

    Usage:
        service = UploadService(provider, UploadValidator(policy))
        result = await service.upload(candidates)
    """

    def __init__(
        self,
        provider: ImageHostProvider,
        validator: UploadValidator | None = None,
        rollback_on_failure: bool = True,
    ):
        """
        Args:
            provider: Image host provider (주입)
            validator: 업로드 검증기 (None이면 기본 정책)
            rollback_on_failure: 배치 실패 시 성공분 삭제 여부
        """
        self.provider = provider
        self.validator = validator or UploadValidator()
        self.rollback_on_failure = rollback_on_failure

    @classmethod
    def from_config(
        cls,
        config: dict,
        provider: ImageHostProvider,
        validator: UploadValidator,
    ) -> "UploadService":
        upload_config = config.get("upload", {}) or {}
        return cls(
            provider=provider,
            validator=validator,
            rollback_on_failure=bool(upload_config.get("rollback_on_failure", True)),
        )

    async def upload(self, candidates: Sequence[UploadCandidate]) -> UploadResult:
        """
        배치 업로드.

        Args:
            candidates: 제출 순서대로의 파일들

        Returns:
            UploadResult (실패 시 assets는 비어 있음)
        """
        try:
            self.validator.validate_batch(candidates)
        except UploadRejectError as e:
            logger.info(f"Upload rejected before network: {e}")
            return UploadResult.failure(
                e.code,
                reject_message(e.code, self.validator.policy.max_file_size),
            )

        outcomes = await asyncio.gather(
            *(self.provider.store(c.data, c.filename) for c in candidates),
            return_exceptions=True,
        )

        stored: list[AssetDescriptor] = []
        first_error: ProviderError | None = None
        unexpected: BaseException | None = None

        for candidate, outcome in zip(candidates, outcomes):
            if isinstance(outcome, AssetDescriptor):
                stored.append(outcome)
            elif isinstance(outcome, ProviderError):
                if first_error is None:
                    first_error = outcome
                logger.warning(
                    f"Store failed for {candidate.filename or 'image'}: {outcome}"
                )
            elif isinstance(outcome, BaseException) and unexpected is None:
                unexpected = outcome

        if unexpected is not None:
            # provider 계약 밖의 예외는 버그 → 상위로 전파
            await self._rollback(stored)
            raise unexpected

        if first_error is not None:
            await self._rollback(stored)
            result = UploadResult.failure(
                ErrorCodes.STORE_FAILED,
                store_failed_message(first_error.message),
            )
        else:
            result = UploadResult.success(stored)

        logger.info(f"Upload finished: {upload_log_context(candidates, result)}")
        return result

    async def _rollback(self, stored: Sequence[AssetDescriptor]) -> None:
        """실패한 배치에서 이미 저장된 이미지 삭제 (best effort)."""
        if not stored:
            return
        if not self.rollback_on_failure:
            logger.warning(
                f"Batch failed; leaving {len(stored)} stored image(s) at provider: "
                f"{[a.asset_id for a in stored]}"
            )
            return

        outcomes = await asyncio.gather(
            *(self.provider.delete(asset.asset_id) for asset in stored),
            return_exceptions=True,
        )
        for asset, outcome in zip(stored, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Rollback delete failed for {asset.asset_id}: {outcome}")
            else:
                logger.info(f"Rolled back {asset.asset_id}")
