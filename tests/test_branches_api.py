from __future__ import annotations

import unittest
import uuid

from helpers import create_branch, create_invoice, create_supplier, make_client


class BranchesApiTests(unittest.TestCase):
    def setUp(self):
        self.client = make_client()

    def test_init_seeds_defaults_once(self):
        r = self.client.post("/sucursales/init")
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual([x["action"] for x in body["results"]], ["created"] * 4)
        self.assertEqual(body["total_sucursales"], 4)
        self.assertEqual(
            {s["nombre"] for s in body["sucursales"]},
            {"Calle 59", "Calle 50", "Calle 13", "Cocina"},
        )

        again = self.client.post("/sucursales/init").json()
        self.assertEqual([x["action"] for x in again["results"]], ["exists"] * 4)
        self.assertEqual(again["total_sucursales"], 4)

    def test_duplicate_name_is_rejected(self):
        create_branch(self.client, "Calle 13")
        r = self.client.post("/sucursales", json={"name": "Calle 13"})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json(), {"error": "Ya existe una sucursal con ese nombre"})

        other = create_branch(self.client, "Cocina")
        r = self.client.put(f"/sucursales/{other['id']}", json={"name": "Calle 13"})
        self.assertEqual(r.status_code, 400)

    def test_blank_name_is_rejected_and_listing_still_works(self):
        r = self.client.post("/sucursales", json={"name": "   "})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json(), {"error": "Please provide a sucursal name"})

        supplier = create_supplier(self.client)
        branch = create_branch(self.client, "Calle 50")
        invoice = create_invoice(self.client, supplier, branch)
        r = self.client.put(f"/sucursales/{branch['id']}", json={"name": "  "})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json(), {"error": "Please provide a sucursal name"})

        r = self.client.get("/sucursales")
        self.assertEqual(r.status_code, 200)
        self.assertEqual([b["name"] for b in r.json()], ["Calle 50"])
        self.assertEqual(self.client.get(f"/payments/{invoice['id']}").json()["branch_name"], "Calle 50")

    def test_rename_cascades_to_invoices(self):
        supplier = create_supplier(self.client)
        x = create_branch(self.client, "X")
        other = create_branch(self.client, "Otra")
        mine = create_invoice(self.client, supplier, x, number="F-1")
        theirs = create_invoice(self.client, supplier, other, number="F-2")

        r = self.client.put(f"/sucursales/{x['id']}", json={"name": "Y", "address": "Calle 7"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["name"], "Y")

        self.assertEqual(self.client.get(f"/payments/{mine['id']}").json()["branch_name"], "Y")
        self.assertEqual(self.client.get(f"/payments/{theirs['id']}").json()["branch_name"], "Otra")

    def test_delete_is_blocked_while_invoices_reference_branch(self):
        supplier = create_supplier(self.client)
        branch = create_branch(self.client, "Calle 59")
        invoice = create_invoice(self.client, supplier, branch)

        r = self.client.delete(f"/sucursales/{branch['id']}")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(
            r.json(),
            {"error": "No se puede eliminar la sucursal porque tiene 1 facturas asociadas"},
        )
        self.assertEqual(len(self.client.get("/sucursales").json()), 1)

        self.client.delete(f"/payments/{invoice['id']}")
        r = self.client.delete(f"/sucursales/{branch['id']}")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(self.client.get("/sucursales").json(), [])

    def test_unknown_branch_is_404(self):
        missing = uuid.uuid4()
        self.assertEqual(self.client.put(f"/sucursales/{missing}", json={"name": "Z"}).status_code, 404)
        self.assertEqual(self.client.delete(f"/sucursales/{missing}").status_code, 404)


if __name__ == "__main__":
    unittest.main()
