from fastapi import APIRouter, Depends, status

from app.features.crawler.dependencies.crawler import get_crawler
from app.features.crawler.schemas.evidence import EvidenceRequest
from app.features.crawler.services.crawler_service import AccessibilityCrawler
from app.platform.response import api_response

router = APIRouter(prefix="/crawler", tags=["crawler"])


@router.post(
    "/evidence",
    response_model=dict,
    status_code=status.HTTP_200_OK,
    summary="Extract accessibility evidence from a URL",
    description="Load a page in a headless browser and collect WCAG-relevant page signals",
)
async def extract_evidence(
    request: EvidenceRequest,
    crawler: AccessibilityCrawler = Depends(get_crawler),
):
    """
    Collect the evidence document for one page.

    This endpoint:
    1. Loads the URL in headless Chrome (30s timeout)
    2. Runs every extractor concurrently against the loaded page
    3. Returns the merged document; categories that failed are listed in
       `extraction_metadata.warnings`

    A page that cannot be loaded at all answers 502 with the navigation
    failure details (see the NavigationError handler).

    **Example Request:**
```json
    {
        "url": "https://example.com"
    }
```
    """
    document = await crawler.extract_page_data(request.url)

    message = "Evidence extracted successfully"
    if document.has_warnings:
        message = "Evidence extracted with gaps"

    return api_response(
        data=document.model_dump(mode="json"),
        message=message,
        status_code=status.HTTP_200_OK,
    )
