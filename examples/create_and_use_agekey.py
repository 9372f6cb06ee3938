import asyncio
import contextlib
import os
import sys
from datetime import datetime, timezone

# Add src to path for running directly
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from agekey import AgeKeyAsync, AgeKeyError, VerificationMethod


async def main() -> None:
    """
    Walks through both AgeKey flows against the test environment.
    Includes:
    - Use AgeKey authorization URL with thresholds and a provenance filter
    - Create AgeKey via Pushed Authorization Request (server-side, needs the secret)
    - OpenTelemetry instrumentation of the pooled HTTP client (applied in __aenter__)
    """
    print(">>> Starting AgeKey example")

    async with AgeKeyAsync(
        client_id=os.getenv("AGEKEY_CLIENT_ID", "ak_test_example"),
        client_secret=os.getenv("AGEKEY_CLIENT_SECRET", "sk_test_example"),
        redirect_uri="https://myapp.example.com/callback",
    ) as agekey:
        print(f">>> Test mode: {agekey.is_test_mode}, endpoints at {agekey.environment.base_url}")

        auth = agekey.use_agekey.get_authorization_url(
            age_thresholds=[13, 18, 21],
            allowed_methods=[VerificationMethod.ID_DOC_SCAN, VerificationMethod.FACIAL_AGE_ESTIMATION],
            provenance={"denied": ["/veratad/*"]},
        )
        print(f">>> Redirect the user to: {auth.url}")
        print("    Store state and nonce in the session for the callback.")

        try:
            created = await agekey.create_agekey.initiate(
                method=VerificationMethod.ID_DOC_SCAN,
                age={"date_of_birth": "2000-01-31"},
                verified_at=datetime.now(timezone.utc),
                verification_id="example-verification-1",
                provenance="/veratad/roc",
            )
            print(f">>> Create AgeKey URL (valid {created.expires_in}s): {created.auth_url}")
        except AgeKeyError as e:
            # Expected with the placeholder credentials
            print(f">>> Create AgeKey failed [{e.code}]: {e.message}")


if __name__ == "__main__":
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(main())
