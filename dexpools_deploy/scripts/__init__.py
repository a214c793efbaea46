# Registered deploy scripts and the network each one targets.
SCRIPTS = {
    "general.ethereum.deploy": "ethereum",
    "general.metis.deploy": "metis_main",
    "otc_app.ethereum.deploy_trade_manager": "ethereum",
    "otc_app.metis.deploy_transaction_manager": "metis_main",
}
