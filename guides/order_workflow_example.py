"""Simple example showing an order and a transport run end to end."""

import asyncio

from courier import CourierApp, CourierConfig, Handlers


async def main():
    """Run both workflows against in-memory collaborators."""
    config = CourierConfig(
        catalog={
            "backend": "inmemory",
            "products": {"P1": "Widget", "P2": "Gadget"},
            "stock": {"P1": 10, "P2": 1},
        },
        workflow={"enrichment": "concurrent"},
    )

    async with CourierApp.from_config(config) as courier:
        handlers = Handlers(courier)

        # Create an order: names are resolved, then store, queue and archive
        response = await handlers.create_order(
            {
                "lineItems": [
                    {"productId": "P1", "quantity": 2},
                    {"productId": "P2", "quantity": 1},
                ],
                "carrierReference": "TRK-001",
            }
        )
        order = response.payload()["order"]
        print(f"✅ Order {order['orderId']} created ({response.status_code})")
        print(f"🔗 Items: {[i['productName'] for i in order['lineItems']]}")

        # Finalize a transport: the second item exceeds stock
        transport = {
            "storeName": "Harbour",
            "lineItems": [
                {"productId": "P1", "quantity": 1},
                {"productId": "P2", "quantity": 5},
            ],
        }
        response = await handlers.finalize_transport(transport)
        body = response.payload()
        print(f"⚠️ Finalize returned {response.status_code}: {body['message']}")
        print(f"📋 Still in place: {body['retained']}")
        print(f"📦 Stock left: {courier.catalog.stock}")


if __name__ == "__main__":
    asyncio.run(main())
