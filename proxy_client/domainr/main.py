import asyncio
import json

from proxy_client.core.exceptions import ClientError
from proxy_client.domainr.api_client import DomainrClient


async def main():

# Main pour tester une recherche Domainr

    query = input("🔎 Entrez le domaine recherché [domai.nr par défaut] : ").strip() or "domai.nr"

    print(f"\n⏳ Recherche asynchrone pour {query}...\n")

    async with DomainrClient(client_id="example") as domainr:
        try:
            data = await domainr.search(query)
        except ClientError as e:
            print(f"❌ {e.name} ({e.code}) : {e.message}")
            return

    print(json.dumps(data, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    asyncio.run(main())
