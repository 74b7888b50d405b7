from dataclasses import replace

from ffiii_rate_updater import (
    ApiConfig,
    CurrencyApiClient,
    FireflyClient,
    RateResolver,
    RateUpdatePipeline,
    SubmissionMode,
    UpdaterConfig,
)
from ffiii_rate_updater.ingestion.currency_api import (
    CURRENCY_API_URL_TEMPLATE,
    FALLBACK_URL_TEMPLATE,
)

# Resolve rates without sending anything
with CurrencyApiClient() as feed:
    table = RateResolver(feed).build(["USD", "EUR", "GBP"], "latest")
print(table.lookup("USD", "EUR"))  # USD/EUR: 0.9xxxxx on 2025-..-..

# Send a single rate by hand
with FireflyClient(ApiConfig(api_url="https://firefly.example.com/api/v1", api_key="token")) as firefly:
    rate = table.lookup("EUR", "GBP")
    firefly.send_single(rate.value, "EUR", "GBP", rate.date)

# Full run: one batch per base currency, with the pages.dev mirror as fallback
config = UpdaterConfig(
    api_key="token",
    api_url="https://firefly.example.com/api/v1",
    currencies=("USD", "EUR", "GBP"),
    feed_urls=(CURRENCY_API_URL_TEMPLATE, FALLBACK_URL_TEMPLATE),
)
result = RateUpdatePipeline(config).run()
print(result.submitted, result.failed)

# Legacy behaviour: every currency pair in its own request
RateUpdatePipeline(replace(config, mode=SubmissionMode.PAIRS)).run()
