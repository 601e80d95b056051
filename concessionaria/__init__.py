"""API REST de estoque e vendas da concessionária (clientes, carros e pedidos)."""

__version__ = "1.0.0"
