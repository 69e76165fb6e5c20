import requests


class FakeProductClient:
    """Katalog w pamieci zamiast HTTP do product-service."""

    def __init__(self, products=None):
        self.products = products or {
            "p-keyboard": {"id": "p-keyboard", "name": "Keyboard", "price": 60.00, "imageUrl": "https://img/kb.png"},
            "p-mouse": {"id": "p-mouse", "name": "Mouse", "price": 20.00, "imageUrl": None},
            "p-monitor": {"id": "p-monitor", "name": "Monitor", "price": 40.00},
        }
        self.calls = []

    def fetch_product(self, product_id):
        self.calls.append(product_id)
        if product_id not in self.products:
            response = requests.Response()
            response.status_code = 404
            raise requests.HTTPError("404 Not Found", response=response)
        return self.products[product_id]


def reload(db, model, key):
    db.expire_all()
    return db.get(model, key)
