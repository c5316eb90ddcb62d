"""
服務層

這個 package 包含純計算邏輯，不負責狀態轉換：
- NamingService：Join Code 生成
- OrderService：玩家順序修正與單步移動
- BoardService：版圖生成（隨機 / standard）
- ViewService：組合給前端的遊戲視圖
"""
