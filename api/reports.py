"""POST /api/reports/generate"""

from fastapi import APIRouter

from api.base import dump, success_response
from core.models import ReportRequest
from core.services.report_service import ReportService


def create_reports_router(report_service: ReportService) -> APIRouter:
    router = APIRouter(tags=["reports"])

    @router.post("/generate")
    def generate_report(body: ReportRequest):
        report = report_service.generate(body)
        return dump(success_response(report.model_dump(mode="json", by_alias=True)))

    return router
