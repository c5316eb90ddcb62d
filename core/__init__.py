"""
核心業務邏輯層

這個 package 包含所有核心業務邏輯，包括：
- 狀態機：集中管理 Game phase 的轉換
- Manager：管理 Game、Membership、玩家順序、版圖的生命週期
- Current Game Selector：每位成員只有一個 current game
- Dispatcher：依 intent 呼叫對應操作
- Locks：並發控制工具
"""
