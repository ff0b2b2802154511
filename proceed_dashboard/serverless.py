# === proceed_dashboard/serverless.py ===
"""
Managed function entry point (Netlify Functions / AWS Lambda).

The same application as ``proceed_dashboard.main``, mounted under the
function's path so ``/.netlify/functions/api/upload`` reaches the upload route.
The store is built on cold start by the application lifespan.
"""
from mangum import Mangum

from proceed_dashboard.core.config import settings
from proceed_dashboard.main import create_app

app = create_app(settings, api_prefix=settings.FUNCTION_API_PREFIX)

handler = Mangum(app, lifespan="auto")
